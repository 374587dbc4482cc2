"""Service layer.

Application services live in sub-packages and are imported from there:

- :mod:`tasktracker.services.auth`: registration, login, token refresh and
  rotation, logout, access-token authentication.
- :mod:`tasktracker.services.identity`: user profile and password lifecycle.
- :mod:`tasktracker.services.teams`: team lifecycle and membership.
- :mod:`tasktracker.services.tasks`: task lifecycle and assignment.

Shared building blocks (base service, errors, deadline, ports, authorization
policies) live under :mod:`tasktracker.services._shared`.

Nothing is re-exported here so that importing a single shared module never
pulls the whole service graph (and the Unit of Work) along with it.
"""
