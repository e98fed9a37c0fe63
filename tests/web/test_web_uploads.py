"""Tests for upload endpoints and static serving."""


class TestPdfUpload:
    """Tests for POST /api/upload/pdf."""

    def test_upload_pdf(self, client, admin, tmp_path):
        response = client.post(
            "/api/upload/pdf",
            files={"pdf": ("Chapter 1.PDF", b"%PDF-1.4 test", "application/pdf")},
            headers=admin.headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["originalName"] == "Chapter 1.PDF"
        assert data["size"] == len(b"%PDF-1.4 test")
        assert data["filename"].startswith("pdf-")
        assert data["filename"].endswith(".pdf")
        assert data["pdfUrl"] == f"/uploads/pdfs/{data['filename']}"
        assert (tmp_path / "uploads" / "pdfs" / data["filename"]).read_bytes() == b"%PDF-1.4 test"

    def test_uploaded_file_is_served(self, client, admin):
        data = client.post(
            "/api/upload/pdf",
            files={"pdf": ("a.pdf", b"%PDF-served", "application/pdf")},
            headers=admin.headers,
        ).json()

        response = client.get(data["pdfUrl"])
        assert response.status_code == 200
        assert response.content == b"%PDF-served"

    def test_rejects_other_types(self, client, admin):
        response = client.post(
            "/api/upload/pdf",
            files={"pdf": ("notes.txt", b"hello", "text/plain")},
            headers=admin.headers,
        )
        assert response.status_code == 400

    def test_missing_file(self, client, admin):
        response = client.post("/api/upload/pdf", headers=admin.headers)
        assert response.status_code == 400
        assert response.json()["error"] == "No file uploaded"

    def test_too_large(self, client, admin, app_config):
        payload = b"x" * (app_config.storage.max_upload_bytes + 1)
        response = client.post(
            "/api/upload/pdf",
            files={"pdf": ("big.pdf", payload, "application/pdf")},
            headers=admin.headers,
        )
        assert response.status_code == 400

    def test_admin_only(self, client, professor):
        response = client.post(
            "/api/upload/pdf",
            files={"pdf": ("a.pdf", b"%PDF", "application/pdf")},
            headers=professor.headers,
        )
        assert response.status_code == 403


class TestImageUpload:
    """Tests for POST /api/upload/image."""

    def test_upload_image(self, client, admin):
        response = client.post(
            "/api/upload/image",
            files={"image": ("cover.png", b"\x89PNG\r\n", "image/png")},
            headers=admin.headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["imageUrl"].startswith("/uploads/images/image-")

    def test_rejects_pdf_as_image(self, client, admin):
        response = client.post(
            "/api/upload/image",
            files={"image": ("a.pdf", b"%PDF", "application/pdf")},
            headers=admin.headers,
        )
        assert response.status_code == 400
