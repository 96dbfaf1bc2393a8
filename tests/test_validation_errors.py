"""Tests for request handling in the stateless service framework."""

import logging
from typing import List

from fastapi.testclient import TestClient
from pydantic import BaseModel

from image_transformer import BaseProcessor, ServiceConfig, StatelessAction, create_app


class RequestPayload(BaseModel):
    """Test form payload."""
    value: int
    note: str | None = None


class TestProcessor(BaseProcessor):
    """Test processor for validation error handling."""

    @property
    def name(self) -> str:
        return "test-validation"

    def get_stateless_actions(self) -> List[StatelessAction]:
        return [
            StatelessAction(
                name="test_form_body",
                path="/test/body",
                request_model=RequestPayload,
                handler=self.handle_request_body,
                methods=("POST",),
            ),
            StatelessAction(
                name="test_no_payload",
                path="/test/ping",
                handler=self.handle_ping,
                methods=("GET",),
            ),
            StatelessAction(
                name="test_bytes",
                path="/test/blob",
                handler=self.handle_blob,
                methods=("GET",),
                media_type="application/octet-stream",
            ),
        ]

    def handle_request_body(self, payload: RequestPayload):
        """Handler for form body test."""
        return {"value": payload.value, "note": payload.note}

    async def handle_ping(self):
        return {"pong": True}

    def handle_blob(self):
        return b"\x00\x01\x02"


class EmptyProcessor(BaseProcessor):
    @property
    def name(self) -> str:
        return "empty"


def test_form_validation_error():
    """Test that a form field of the wrong type returns 400."""
    app = create_app(TestProcessor())
    client = TestClient(app)

    response = client.post("/test/body", data={"value": "not_an_int"})

    assert response.status_code == 400
    data = response.json()
    assert "error" in data
    assert "Validation error" in data["error"]


def test_form_missing_required_field():
    app = create_app(TestProcessor())
    client = TestClient(app)

    response = client.post("/test/body", data={"note": "hello"})

    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


def test_form_validation_success():
    """Test that a valid multipart body returns 200."""
    app = create_app(TestProcessor())
    client = TestClient(app)

    response = client.post(
        "/test/body",
        data={"value": "42"},
        files={"note": ("note.txt", b"from a file", "text/plain")},
    )

    assert response.status_code == 200
    assert response.json() == {"value": 42, "note": "from a file"}


def test_repeated_field_last_value_wins():
    app = create_app(TestProcessor())
    client = TestClient(app)

    response = client.post("/test/body", content=b"value=1&value=2", headers={
        "Content-Type": "application/x-www-form-urlencoded",
    })

    assert response.status_code == 200
    assert response.json()["value"] == 2


def test_malformed_multipart_body():
    app = create_app(TestProcessor())
    client = TestClient(app)

    response = client.post(
        "/test/body",
        content=b"garbage",
        headers={"Content-Type": "multipart/form-data"},
    )

    assert response.status_code == 400
    assert response.text.startswith("Malformed multipart body")


def test_body_size_limit():
    app = create_app(TestProcessor(), ServiceConfig(max_body_bytes=16))
    client = TestClient(app)

    response = client.post("/test/body", data={"value": "1", "note": "x" * 64})

    assert response.status_code == 413
    assert response.text == "Request body exceeds the 16 byte limit"


def test_action_without_payload():
    app = create_app(TestProcessor())
    client = TestClient(app)

    response = client.get("/test/ping")

    assert response.status_code == 200
    assert response.json() == {"pong": True}


def test_bytes_rendered_with_media_type():
    app = create_app(TestProcessor())
    client = TestClient(app)

    response = client.get("/test/blob")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/octet-stream"
    assert response.content == b"\x00\x01\x02"


def test_processor_without_actions_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="image_transformer.api"):
        app = create_app(EmptyProcessor(), ServiceConfig(description="nothing here"))

    assert "returned nothing" in caplog.text
    assert app.title == "Empty API"
    assert app.description == "nothing here"


def test_non_utf8_file_part_for_text_field():
    app = create_app(TestProcessor())
    client = TestClient(app)

    response = client.post(
        "/test/body",
        data={"value": "1"},
        files={"note": ("note.bin", b"\xff\xfe", "application/octet-stream")},
    )

    assert response.status_code == 400
    assert response.text == "Malformed multipart body: field 'note' is not valid UTF-8"
