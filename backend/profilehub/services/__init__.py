"""Service layer.

Subpackages
-----------
- ``profilehub.services.auth``: sign-up, sign-in, refresh and sign-out
  (:class:`AuthService`, :class:`TokenVerifier` and their DTOs).
- ``profilehub.services.profile``: public listings, own-profile updates and
  embedded video links (:class:`ProfileService`).
- ``profilehub.services.identity``: the public user view shared by both.
- ``profilehub.services._shared``: errors, ports, policies and the base
  service with its Unit of Work helpers.

Nothing is re-exported here: repositories import ``_shared.errors`` and an
eager import of the services would close an import cycle.
"""
