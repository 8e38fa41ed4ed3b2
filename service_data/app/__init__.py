"""
Random Data Service package.

- app.main: Application entrypoint that wires routes and lifecycle.
- app.generator: Pseudo-random record models and generation.
- app.auth: JWKS fetching and bearer token verification.

Importing this package performs no IO; the key set is only fetched while
handling a protected request.
"""
