import sys
from pathlib import Path
from typing import List

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from fastapi.testclient import TestClient

from ghostsay.interfaces.speech_output import ISpeechOutput
from ghostsay.server.app import create_app


class StubSpeechOutput(ISpeechOutput):
    """Records what it was asked to say and returns a fixed result."""
    def __init__(self, result: bool = True):
        self.result = result
        self.calls: List[str] = []

    async def speak(self, text: str) -> bool:
        self.calls.append(text)
        return self.result


def _client(result: bool = True):
    speech = StubSpeechOutput(result)
    return TestClient(create_app(speech)), speech


def test_missing_text_returns_error_and_does_not_speak():
    client, speech = _client()
    r = client.get("/say")
    assert r.status_code == 400
    assert r.json() == {"error": "Missing or invalid 'text' parameter"}
    assert speech.calls == []


def test_repeated_text_parameter_is_rejected():
    client, speech = _client()
    r = client.get("/say", params=[("text", "one"), ("text", "two")])
    assert r.status_code == 400
    assert "error" in r.json()
    assert speech.calls == []


def test_successful_speech():
    client, speech = _client(result=True)
    r = client.get("/say", params={"text": "Hello"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("application/json")
    assert r.json() == {"success": True, "message": "Text spoken successfully"}
    assert speech.calls == ["Hello"]


def test_failed_speech():
    client, speech = _client(result=False)
    r = client.get("/say", params={"text": "Hello"})
    assert r.status_code == 200
    assert r.json() == {"success": False, "message": "Failed to execute say command"}
    assert len(speech.calls) == 1


def test_text_is_sanitized_before_speaking_and_not_echoed():
    client, speech = _client()
    r = client.get("/say", params={"text": "  Tom & Jerry; `rm -rf /` | $HOME \n"})
    assert speech.calls == ["Tom and Jerry rm -rf /  HOME"]
    assert "Tom and Jerry" not in r.text


def test_empty_text_is_still_passed_on():
    client, speech = _client()
    r = client.get("/say?text=")
    assert r.status_code == 200
    assert speech.calls == [""]


def test_only_say_route_exists():
    client, speech = _client()
    assert client.get("/").status_code == 404
    assert client.get("/docs").status_code == 404
    assert client.post("/say", params={"text": "hi"}).status_code == 405
    assert speech.calls == []


def test_each_app_has_its_own_speech_output():
    first, first_speech = _client(result=True)
    second, second_speech = _client(result=False)
    assert first.get("/say?text=a").json()["success"] is True
    assert second.get("/say?text=b").json()["success"] is False
    assert first_speech.calls == ["a"]
    assert second_speech.calls == ["b"]
