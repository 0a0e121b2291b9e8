"""OAuth identity gateway: GitHub and Google login, account linking and whitelist access."""
