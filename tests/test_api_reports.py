"""
HTTP tests for /reports: intake in every modality, listing and lookup.
"""

import asyncio

import pytest

from conftest import make_token
from config import settings
from services.extractors import OCR_UNAVAILABLE_TEXT
from services.ocr_service import get_ocr_service


def post_text(client, headers, text):
    return client.post("/reports", json={"sourceType": "text", "text": text}, headers=headers)


class TestCreateFromText:

    def test_created_and_summarized(self, client, auth_headers):
        response = post_text(client, auth_headers, "  Vitals normal.  ")

        assert response.status_code == 201
        report = response.json()["report"]
        assert report["sourceType"] == "text"
        assert report["originalText"] == "Vitals normal."
        assert report["summaryText"] == "Normal vitals."
        assert report["status"] == "completed"
        assert report["ownerId"] == "clinician-1"

    def test_whitespace_rejected_and_nothing_stored(self, client, auth_headers):
        response = post_text(client, auth_headers, "   ")

        assert response.status_code == 400
        assert client.get("/reports").json()["total"] == 0

    def test_summarizer_down_still_creates_pending(self, client, auth_headers, summarizer):
        summarizer.fail = True

        response = post_text(client, auth_headers, "Vitals normal.")

        assert response.status_code == 201
        report = response.json()["report"]
        assert report["status"] == "pending"
        assert "summaryText" not in report

    def test_unauthenticated(self, client):
        response = post_text(client, {}, "Vitals normal.")

        assert response.status_code == 401
        assert response.json() == {"detail": "Unauthorized"}

    def test_cookie_credentials(self, client):
        client.cookies.set(settings.ACCESS_COOKIE_NAME, make_token("cookie-user"))
        response = post_text(client, {}, "Vitals normal.")

        assert response.status_code == 201
        assert response.json()["report"]["ownerId"] == "cookie-user"

    @pytest.mark.parametrize("body", [
        {"sourceType": "audio", "text": "x"},
        {"text": "no source type"},
        ["not", "an", "object"],
    ])
    def test_invalid_body(self, client, auth_headers, body):
        response = client.post("/reports", json=body, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid input"

    def test_image_source_in_json_needs_a_file(self, client, auth_headers):
        response = client.post("/reports", json={"sourceType": "image"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Image file required"

    def test_text_as_form_fields(self, client, auth_headers):
        response = client.post(
            "/reports",
            data={"sourceType": "text", "text": "BP 120/80"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["report"]["originalText"] == "BP 120/80"


class TestCreateFromImage:

    def test_ocr_text_becomes_report(self, client, auth_headers, ocr):
        response = client.post(
            "/reports",
            data={"sourceType": "image"},
            files={"image": ("scan.png", b"\x89PNG fake", "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 201
        report = response.json()["report"]
        assert report["sourceType"] == "image"
        assert report["originalText"] == "BP 120/80"
        assert ocr.calls == [b"\x89PNG fake"]

    def test_unsupported_type_never_reaches_ocr(self, client, auth_headers, ocr):
        response = client.post(
            "/reports",
            data={"sourceType": "image"},
            files={"image": ("scan.gif", b"GIF89a", "image/gif")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Unsupported image type"
        assert ocr.calls == []
        assert client.get("/reports").json()["total"] == 0

    def test_missing_file(self, client, auth_headers):
        response = client.post(
            "/reports",
            data={"sourceType": "image"},
            files={"other": ("note.txt", b"x", "text/plain")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Image file required"

    def test_ocr_unavailable_uses_placeholder_text(self, client, auth_headers, ocr):
        ocr.success = False

        response = client.post(
            "/reports",
            data={"sourceType": "image"},
            files={"image": ("scan.jpg", b"jpeg", "image/jpeg")},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["report"]["originalText"] == OCR_UNAVAILABLE_TEXT

    def test_undecodable_image_rejected_without_placeholder(self, client, auth_headers):
        from main import app

        app.dependency_overrides.pop(get_ocr_service)

        response = client.post(
            "/reports",
            data={"sourceType": "image"},
            files={"image": ("scan.png", b"these bytes are not a png", "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Unable to read image file"
        assert client.get("/reports").json()["total"] == 0


class TestCreateFromPdf:

    def test_pdf_text_layer_summarized(self, client, auth_headers, pdf_bytes, summarizer):
        response = client.post(
            "/reports/pdf",
            files={"document": ("labs.pdf", pdf_bytes("Vitals normal."), "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["report"]["sourceType"] == "pdf"
        assert "Vitals normal." in body["report"]["originalText"]
        assert body["report"]["summaryText"] == "Normal vitals."
        assert body["report"]["status"] == "completed"
        assert len(summarizer.calls) == 1

    def test_pdf_found_by_suffix_among_other_files(self, client, auth_headers, pdf_bytes):
        response = client.post(
            "/reports/pdf",
            files=[
                ("notes", ("readme.txt", b"hello", "text/plain")),
                ("scan", ("labs.pdf", pdf_bytes("Vitals normal."), "application/octet-stream")),
            ],
            headers=auth_headers,
        )

        assert response.status_code == 201

    def test_empty_pdf(self, client, auth_headers):
        response = client.post(
            "/reports/pdf",
            files={"file": ("empty.pdf", b"", "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Uploaded PDF is empty"
        assert client.get("/reports").json()["total"] == 0

    def test_non_pdf(self, client, auth_headers):
        response = client.post(
            "/reports/pdf",
            files={"file": ("scan.png", b"\x89PNG", "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Only PDF files are allowed"

    def test_unreadable_pdf(self, client, auth_headers):
        response = client.post(
            "/reports/pdf",
            files={"file": ("broken.pdf", b"not really a pdf", "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Unable to read PDF file"

    def test_pdf_without_text_layer(self, client, auth_headers, pdf_bytes):
        response = client.post(
            "/reports/pdf",
            files={"file": ("blank.pdf", pdf_bytes(""), "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "No readable text found in PDF"

    def test_no_file(self, client, auth_headers):
        response = client.post("/reports/pdf", json={}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "PDF file is required"

    def test_unauthenticated(self, client, pdf_bytes):
        response = client.post("/reports/pdf", files={"file": ("labs.pdf", pdf_bytes(), "application/pdf")})
        assert response.status_code == 401


class TestReadReports:

    def test_get_by_id(self, client, auth_headers):
        created = post_text(client, auth_headers, "Vitals normal.").json()["report"]

        response = client.get(f"/reports/{created['id']}")

        assert response.status_code == 200
        assert response.json()["report"]["id"] == created["id"]

    def test_unknown_id(self, client):
        response = client.get("/reports/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json()["detail"] == "Not found"

    def test_malformed_id(self, client):
        response = client.get("/reports/not-a-uuid")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid report id"

    def test_list_paginates_and_clamps(self, client, auth_headers):
        for i in range(3):
            post_text(client, auth_headers, f"note {i}")

        body = client.get("/reports", params={"page": 2, "limit": 2}).json()
        assert (body["total"], body["page"], body["limit"]) == (3, 2, 2)
        assert len(body["items"]) == 1

        body = client.get("/reports", params={"page": 0, "limit": 1000}).json()
        assert (body["page"], body["limit"]) == (1, 50)
        assert len(body["items"]) == 3

    def test_zero_limit_clamps_to_one(self, client, auth_headers):
        for i in range(3):
            post_text(client, auth_headers, f"note {i}")

        body = client.get("/reports", params={"limit": 0}).json()

        assert (body["total"], body["page"], body["limit"]) == (3, 1, 1)
        assert len(body["items"]) == 1

    def test_non_numeric_page(self, client):
        response = client.get("/reports", params={"page": "first"})

        assert response.status_code == 422
        assert response.json()["detail"] == "Validation error"


class TestServiceEndpoints:

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"

    def test_health(self, client):
        body = client.get("/health").json()

        assert body["checks"]["database"]["status"] == "ok"
        assert body["checks"]["gemini"]["configured"] is False
        assert "X-Process-Time" in client.get("/").headers

    def test_health_checks_tesseract_off_the_event_loop(self, client, monkeypatch):
        from services.ocr_service import ocr_service

        threads = []

        def status():
            try:
                asyncio.get_running_loop()
                threads.append("event loop")
            except RuntimeError:
                threads.append("worker thread")
            return {"engine": "tesseract", "available": False}

        monkeypatch.setattr(ocr_service, "get_status", status)

        body = client.get("/health").json()

        assert threads == ["worker thread"]
        assert body["checks"]["ocr"]["status"] == "warning"
