"""Authenticated HTTP client for the JSC tenant APIs.

:class:`SyncClient` wraps :mod:`httpx` and attaches the session cookie and
anti-forgery header produced by a login to every request.

Example::

    from jscsession.client import SyncClient

    with SyncClient("radar.wandera.com", result.credentials, customer_id=cid) as client:
        resp = client.get("/gate/admin-service/v4/customers/{customerid}/admins")
"""

from jscsession.client.sync_client import SyncClient

__all__ = ["SyncClient"]
