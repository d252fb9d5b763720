"""HTTP primitives: Request, Response, Headers, cookies."""
