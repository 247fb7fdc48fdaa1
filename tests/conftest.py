"""Shared fixtures.

FakeClient stands in for GHLClient: it records every request and answers
with queued ApiResponse objects (or a responder callable), so tool modules
can be exercised without the network.
"""

from collections import namedtuple

import pytest

from ghl_client import ApiResponse

LOCATION_ID = "loc-123"

Call = namedtuple("Call", "method endpoint params json_body")


class FakeClient:
    def __init__(self, location_id: str = LOCATION_ID):
        self.location_id = location_id
        self.calls = []
        self.responses = []
        self.responder = None

    def queue(self, *responses):
        self.responses.extend(responses)
        return self

    async def request(self, method, endpoint, params=None, json_body=None):
        call = Call(method, endpoint, params, json_body)
        self.calls.append(call)
        if self.responder is not None:
            return self.responder(call)
        if self.responses:
            return self.responses.pop(0)
        return ApiResponse.ok({})

    @property
    def last(self) -> Call:
        return self.calls[-1]


def ok(data=None) -> ApiResponse:
    return ApiResponse.ok({} if data is None else data)


def fail(status_code, message) -> ApiResponse:
    return ApiResponse.fail(status_code, f"GHL API Error ({status_code}): {message}")


@pytest.fixture
def client():
    return FakeClient()
