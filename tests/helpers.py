"""Test helpers: response bodies, a scripted CodeForge API and recording doubles."""

import json

import httpx


API_URL = "https://api.test.local/"


def run_body(status="queued", run_id="r1", sdks=None):
    return {"generation_run_id": run_id, "status": status, "sdks": sdks or []}


def sdk_body(sdk_id, name, status="completed", logs_url=None, package=None):
    body = {
        "id": sdk_id,
        "name": name,
        "status": status,
        "logs_url": logs_url or f"https://logs.test.local/{sdk_id}",
    }
    if package is not None:
        body["published_package"] = package
    return body


class FakeApi:
    """
    Records every request and answers from per-route queues.

    Each route holds a list of httpx.Response objects; the last one is
    repeated once the list runs out.
    """

    def __init__(self):
        self.requests = []
        self.routes = {}

    def on(self, method, path, *responses):
        self.routes[(method, path)] = list(responses)
        return self

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def json_body(self, request):
        return json.loads(request.content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"error": "no route"})
        template = queue.pop(0) if len(queue) > 1 else queue[0]
        # Fresh response per call; httpx binds a response to its request
        return httpx.Response(
            template.status_code, headers=template.headers, content=template.content
        )

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)


class SleepRecorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


class MemoryOutputSink:
    """Keeps outputs in a dict."""

    def __init__(self):
        self.outputs = {}

    def set_output(self, name, value):
        self.outputs[name] = value
