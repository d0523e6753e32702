"""
Formulario Backend — API Endpoint Tests
=========================================

What:  End-to-end tests through the FastAPI app (middleware, handlers, routes).
How:   HTTPX AsyncClient over ASGITransport; the database dependency points
       at the per-test in-memory SQLite engine.

What we test:
    ✅ Status codes and the {"error": ...} body for 400/404
    ✅ PDF responses: content type, attachment filename, Content-Length
    ✅ Soft delete through the HTTP surface
    ✅ Request id header and health check
"""

import io
from unittest.mock import patch
from uuid import uuid4

import pytest
from pypdf import PdfReader

from formulario.exceptions import DocumentGenerationError
from formulario.routes.pdf import slugify_filename

GEOMETRY = [
    ("Geometry", "Pythagorean", "a² + b² = c²", "Right triangle relation"),
    ("Geometry", "Circle area", "A = pi r^2", None),
]


class TestSlugifyFilename:

    def test_non_alphanumerics_become_underscores(self):
        assert slugify_filename("Álgebra Básica 2") == "_lgebra_b_sica_2"

    def test_lowercases(self):
        assert slugify_filename("Pythagorean") == "pythagorean"


class TestUserEndpoints:

    @pytest.mark.asyncio
    async def test_upsert_then_fetch(self, test_client):
        response = await test_client.post("/api/users", json={"id": "uid-1", "email": "ada@example.com"})
        assert response.status_code == 201

        by_id = await test_client.get("/api/users/uid-1")
        by_email = await test_client.get("/api/users/email/ada@example.com")

        assert by_id.status_code == 200
        assert by_email.json()["id"] == "uid-1"

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_client):
        response = await test_client.get("/api/users/nobody")
        assert response.status_code == 404
        assert response.json()["error"] == "Usuario no encontrado"


class TestBookAndFormulaEndpoints:

    @pytest.mark.asyncio
    async def test_book_lifecycle(self, test_client, seed):
        await seed()

        created = await test_client.post("/api/books", json={"user_id": "user-1", "name": "Geometry"})
        assert created.status_code == 201
        book_uuid = created.json()["uuid"]

        updated = await test_client.put(f"/api/books/{book_uuid}", json={"name": "Geometría"})
        assert updated.json()["name"] == "Geometría"

        deleted = await test_client.delete(f"/api/books/{book_uuid}")
        assert deleted.status_code == 200
        assert deleted.json()["book"]["is_deleted"] is True

        assert (await test_client.get(f"/api/books/{book_uuid}")).status_code == 404
        assert (await test_client.get("/api/books/user/user-1")).json() == []

    @pytest.mark.asyncio
    async def test_formula_lifecycle(self, test_client, seed):
        data = await seed(books=["Geometry"])

        created = await test_client.post(
            "/api/formulas",
            json={
                "book_id": data.books["Geometry"].id,
                "user_id": "user-1",
                "name": "Heron",
                "formula_text": "A = sqrt(s(s-a)(s-b)(s-c))",
            },
        )
        assert created.status_code == 201
        formula_uuid = created.json()["uuid"]

        fetched = await test_client.get(f"/api/formulas/{formula_uuid}")
        assert fetched.json()["book"]["name"] == "Geometry"

        deleted = await test_client.delete(f"/api/formulas/{formula_uuid}")
        assert deleted.json()["message"] == "Fórmula eliminada correctamente"

        missing = await test_client.get(f"/api/formulas/{formula_uuid}")
        assert missing.status_code == 404
        assert missing.json()["error"] == "Fórmula no encontrada"

    @pytest.mark.asyncio
    async def test_listings(self, test_client, seed):
        data = await seed(books=["Geometry"], formulas=GEOMETRY)
        book = data.books["Geometry"]

        recent = await test_client.get("/api/formulas")
        by_book = await test_client.get(f"/api/formulas/book/{book.id}")
        by_book_uuid = await test_client.get(f"/api/formulas/book-uuid/{book.uuid}")
        by_user = await test_client.get("/api/formulas/user/user-1")

        assert [f["name"] for f in recent.json()["formulas"]] == ["Circle area", "Pythagorean"]
        for response in (by_book, by_book_uuid, by_user):
            assert [f["name"] for f in response.json()] == ["Circle area", "Pythagorean"]

    @pytest.mark.asyncio
    async def test_malformed_uuid_is_rejected(self, test_client):
        response = await test_client.get("/api/formulas/not-a-uuid")
        assert response.status_code == 422


class TestPdfEndpoints:

    @pytest.mark.asyncio
    async def test_single_formula_pdf(self, test_client, seed):
        data = await seed(books=["Geometry"], formulas=GEOMETRY)

        response = await test_client.get(f"/api/pdf/formula/{data.formulas['Pythagorean'].uuid}")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="formula-pythagorean.pdf"'
        assert int(response.headers["content-length"]) == len(response.content)
        reader = PdfReader(io.BytesIO(response.content))
        assert len(reader.pages) == 1
        assert "Libro: Geometry" in reader.pages[0].extract_text()

    @pytest.mark.asyncio
    async def test_deleted_formula_pdf_is_404(self, test_client, seed):
        data = await seed(books=["Geometry"], formulas=GEOMETRY, deleted_formulas=["Pythagorean"])

        response = await test_client.get(f"/api/pdf/formula/{data.formulas['Pythagorean'].uuid}")

        assert response.status_code == 404
        assert response.json()["error"] == "Fórmula no encontrada"

    @pytest.mark.asyncio
    async def test_book_pdf(self, test_client, seed):
        data = await seed(books=["Álgebra Básica"], formulas=[
            ("Álgebra Básica", "Square", "(a+b)² = a² + 2ab + b²", None),
            ("Álgebra Básica", "Difference", "a² - b² = (a+b)(a-b)", None),
        ])

        response = await test_client.get(f"/api/pdf/book/{data.books['Álgebra Básica'].uuid}")

        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="libro-_lgebra_b_sica.pdf"'
        reader = PdfReader(io.BytesIO(response.content))
        assert len(reader.pages) == 5
        assert "Square" in reader.pages[2].extract_text()
        assert "Difference" in reader.pages[3].extract_text()

    @pytest.mark.asyncio
    async def test_book_pdf_without_formulas(self, test_client, seed):
        data = await seed(books=["Empty"])

        response = await test_client.get(f"/api/pdf/book/{data.books['Empty'].uuid}")

        assert response.status_code == 404
        assert response.json()["error"] == "No se encontraron fórmulas en este libro"

    @pytest.mark.asyncio
    async def test_book_pdf_unknown_book(self, test_client):
        response = await test_client.get(f"/api/pdf/book/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"] == "Libro no encontrado"

    @pytest.mark.asyncio
    async def test_custom_pdf_uses_default_title(self, test_client, seed):
        data = await seed(books=["Geometry"], formulas=GEOMETRY)

        response = await test_client.post(
            "/api/pdf/custom",
            json={"formula_uuids": [str(f.uuid) for f in data.formulas.values()]},
        )

        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="formulas-personalizadas.pdf"'
        reader = PdfReader(io.BytesIO(response.content))
        assert len(reader.pages) == 5
        assert "Personalizada" in reader.pages[0].extract_text()

    @pytest.mark.asyncio
    async def test_custom_pdf_with_title(self, test_client, seed):
        data = await seed(books=["Geometry"], formulas=GEOMETRY)

        response = await test_client.post(
            "/api/pdf/custom",
            json={"formula_uuids": [str(data.formulas["Circle area"].uuid)], "title": "Exam sheet"},
        )

        reader = PdfReader(io.BytesIO(response.content))
        assert len(reader.pages) == 4
        assert "Exam sheet" in reader.pages[0].extract_text()

    @pytest.mark.asyncio
    async def test_custom_pdf_empty_selection(self, test_client):
        response = await test_client.post("/api/pdf/custom", json={"formula_uuids": []})

        assert response.status_code == 400
        assert response.json()["error"] == "Se requiere un array de formula_uuids"

    @pytest.mark.asyncio
    async def test_custom_pdf_missing_field(self, test_client):
        response = await test_client.post("/api/pdf/custom", json={})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_custom_pdf_no_matches(self, test_client):
        response = await test_client.post("/api/pdf/custom", json={"formula_uuids": [str(uuid4())]})

        assert response.status_code == 404
        assert response.json()["error"] == "No se encontraron fórmulas"

    @pytest.mark.asyncio
    async def test_generation_failure_is_500_with_cause(self, test_client, seed):
        data = await seed(books=["Geometry"], formulas=GEOMETRY)
        failure = DocumentGenerationError("Error generando el PDF de la fórmula", cause=RuntimeError("disk full"))

        with patch("formulario.routes.pdf.pdf_service.generate_formula_pdf", side_effect=failure):
            response = await test_client.get(f"/api/pdf/formula/{data.formulas['Pythagorean'].uuid}")

        assert response.status_code == 500
        assert response.json()["error"] == "Error generando el PDF de la fórmula: disk full"
        assert response.json()["code"] == "pdf_generation_error"


class TestOperationalEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "API funcionando correctamente"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        response = await test_client.get("/api/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["x-request-id"] == "abc123"

    @pytest.mark.asyncio
    async def test_health_degraded_when_database_unreachable(self, test_client, mock_db_session):
        from formulario.database import get_db_session
        from formulario.main import app

        mock_db_session.execute.side_effect = ConnectionRefusedError("db down")

        async def broken_session():
            yield mock_db_session

        app.dependency_overrides[get_db_session] = broken_session
        response = await test_client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["database"] == "disconnected"

    @pytest.mark.asyncio
    async def test_unsafe_request_id_is_replaced(self, test_client):
        response = await test_client.get("/api/health", headers={"X-Request-ID": "bad id; drop table"})
        rid = response.headers["x-request-id"]
        assert rid != "bad id; drop table"
        assert len(rid) == 8

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, test_client):
        response = await test_client.get(f"/api/books/{uuid4()}", headers={"X-Request-ID": "trace-42"})

        assert response.status_code == 404
        assert response.json() == {
            "error": "Libro no encontrado",
            "code": "not_found",
            "request_id": "trace-42",
        }
