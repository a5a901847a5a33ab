"""Authentication primitives.

Learn: Three small pieces, composed by the auth service:
1. password → bcrypt hash / verify and the password policy
2. jwt → HMAC-signed bearer tokens carrying {sub, email, exp}
3. dependencies → the bearer-token guard for protected routes

The guard resolves a CurrentIdentity that routes pass explicitly into
the service layer.
"""
