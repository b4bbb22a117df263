"""Auth module — JWT access tokens and role-based access control."""
