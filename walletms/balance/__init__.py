"""Balance service: keeps account balances in step with published transaction messages."""