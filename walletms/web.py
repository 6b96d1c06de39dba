"""HTTP layer: a small routing web server and the wallet's JSON handlers."""

from __future__ import annotations

import dataclasses
import json
import logging
import re
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from werkzeug.exceptions import HTTPException
from werkzeug.routing import Map, Rule
from werkzeug.serving import run_simple
from werkzeug.wrappers import Request, Response

from walletms.usecases import (
    CreateAccountInput,
    CreateAccountUseCase,
    CreateClientInput,
    CreateClientUseCase,
    CreateTransactionInput,
    CreateTransactionUseCase,
)

logger = logging.getLogger(__name__)

Handler = Callable[..., Response]
"""A route handler: called with the request and any path parameters as keywords."""

_PATH_PARAM = re.compile(r"\{(\w+)\}")


class WebServer:
    """Routes every registered path, for one HTTP method, to its handler.

    Paths may hold parameters written as ``{name}``; their values are passed
    to the handler as keyword arguments.
    """

    def __init__(self, address: str, method: str = "POST") -> None:
        self.address = address
        self.method = method.upper()
        self.handlers: dict[str, Handler] = {}

    def add_handler(self, path: str, handler: Handler) -> None:
        """Route a path to a handler, replacing any handler it had."""
        self.handlers[path] = handler

    def build_app(self) -> Callable[..., Any]:
        """Build the WSGI application for the handlers registered so far."""
        handlers = dict(self.handlers)
        url_map = Map(
            [
                Rule(_PATH_PARAM.sub(r"<\1>", path), endpoint=path, methods=[self.method])
                for path in handlers
            ]
        )

        @Request.application
        def application(request: Request) -> Response:
            adapter = url_map.bind_to_environ(request.environ)
            try:
                endpoint, values = adapter.match()
            except HTTPException as exc:
                response = exc.get_response(request.environ)
            else:
                response = handlers[endpoint](request, **values)
            logger.info('"%s %s" %s', request.method, request.path, response.status_code)
            return response

        return application

    def start(self) -> None:
        """Serve the application on the configured host:port until interrupted."""
        host, _, port = self.address.rpartition(":")
        run_simple(host or "0.0.0.0", int(port), self.build_app())


class _BadRequest(Exception):
    """The request body could not be decoded into the expected input."""


def _read_object(request: Request) -> Mapping[str, Any]:
    try:
        data = json.loads(request.get_data())
    except ValueError as err:
        raise _BadRequest(str(err)) from err
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise _BadRequest("expected a JSON object")
    return data


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _BadRequest(f"{key} must be a string")
    return value


def _number(data: Mapping[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _BadRequest(f"{key} must be a number")
    return float(value)


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"cannot encode {type(value).__name__} as JSON")


def _json_response(output: Any) -> Response:
    body = json.dumps(dataclasses.asdict(output), default=_encode) + "\n"
    return Response(body, mimetype="application/json")


class ClientHandler:
    """Creates clients from JSON requests."""

    def __init__(self, use_case: CreateClientUseCase) -> None:
        self.use_case = use_case

    def create_client(self, request: Request) -> Response:
        """Decode the client, create it and answer with it as JSON."""
        try:
            data = _read_object(request)
            dto = CreateClientInput(name=_text(data, "name"), email=_text(data, "email"))
        except _BadRequest:
            return Response(status=400)
        try:
            output = self.use_case.execute(dto)
        except Exception as err:
            return Response(str(err), status=500, mimetype="application/json")
        return _json_response(output)


class AccountHandler:
    """Opens accounts from JSON requests."""

    def __init__(self, use_case: CreateAccountUseCase) -> None:
        self.use_case = use_case

    def create_account(self, request: Request) -> Response:
        """Decode the client id, open the account and answer with its id as JSON."""
        try:
            data = _read_object(request)
            dto = CreateAccountInput(client_id=_text(data, "client_id"))
        except _BadRequest:
            return Response(status=400)
        try:
            output = self.use_case.execute(dto)
        except Exception:
            return Response(status=500)
        return _json_response(output)


class TransactionHandler:
    """Carries out transfers from JSON requests."""

    def __init__(self, use_case: CreateTransactionUseCase) -> None:
        self.use_case = use_case

    def create_transaction(self, request: Request) -> Response:
        """Decode the transfer, carry it out and answer with it as JSON."""
        try:
            data = _read_object(request)
            dto = CreateTransactionInput(
                account_id_from=_text(data, "account_id_from"),
                account_id_to=_text(data, "account_id_to"),
                amount=_number(data, "amount"),
            )
        except _BadRequest:
            return Response(status=400)
        try:
            output = self.use_case.execute(dto)
        except Exception as err:
            return Response(str(err), status=500, mimetype="text/plain")
        return _json_response(output)