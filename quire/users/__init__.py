"""Users: the credential store, validation and the users API."""
