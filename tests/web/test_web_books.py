"""Tests for book endpoints."""

from schoolshelf.core.models import BookType, Role


def _create(client, admin, **overrides):
    body = {
        "title": "Geometry",
        "author": "Euclid",
        "curriculum_component": "Mathematics",
        "class_groups": ["2nd Year A", "1st Year A", "2nd Year A"],
    }
    body.update(overrides)
    return client.post("/api/books", json=body, headers=admin.headers)


class TestCreateBook:
    """Tests for POST /api/books."""

    def test_create_with_defaults_and_sorted_tags(self, client, admin):
        response = _create(client, admin)
        assert response.status_code == 201
        data = response.json()
        assert data["class_groups"] == ["1st Year A", "2nd Year A"]
        assert data["book_type"] == "student"
        assert data["description"] == ""
        assert data["cover_url"] == ""
        assert data["pdf_url"] is None

    def test_required_fields(self, client, admin):
        response = _create(client, admin, author="")
        assert response.status_code == 400
        assert response.json()["error"] == "Title, author and curriculum component are required"

    def test_unknown_component(self, client, admin):
        response = _create(client, admin, curriculum_component="Astrology")
        assert response.status_code == 400
        assert "Astrology" in response.json()["error"]

    def test_invalid_book_type(self, client, admin):
        response = _create(client, admin, book_type="teacher")
        assert response.status_code == 400

    def test_only_admin_creates(self, client, professor):
        assert _create(client, professor).status_code == 403

    def test_tags_written_with_book(self, client, admin, db):
        book_id = _create(client, admin).json()["id"]
        rows = db.query(
            "SELECT class_group FROM book_class_groups WHERE book_id = :id ORDER BY class_group",
            {"id": book_id},
        )
        assert [r["class_group"] for r in rows] == ["1st Year A", "2nd Year A"]


class TestUpdateBook:
    """Tests for PUT /api/books/{id}."""

    def test_empty_class_groups_clears_tags(self, client, admin):
        book_id = _create(client, admin).json()["id"]

        response = client.put(f"/api/books/{book_id}", json={"class_groups": []}, headers=admin.headers)
        assert response.status_code == 200
        assert response.json()["class_groups"] == []
        assert client.get(f"/api/books/{book_id}", headers=admin.headers).json()["class_groups"] == []

    def test_scalar_patch_keeps_tags(self, client, admin):
        book_id = _create(client, admin).json()["id"]

        response = client.put(f"/api/books/{book_id}", json={"title": "Plane Geometry"}, headers=admin.headers)
        data = response.json()
        assert data["title"] == "Plane Geometry"
        assert data["author"] == "Euclid"
        assert data["class_groups"] == ["1st Year A", "2nd Year A"]

    def test_no_scalar_change_reads_back(self, client, admin):
        """An update with only tags (or nothing) still returns the book."""
        book_id = _create(client, admin).json()["id"]

        response = client.put(f"/api/books/{book_id}", json={}, headers=admin.headers)
        assert response.status_code == 200
        assert response.json()["title"] == "Geometry"

        response = client.put(
            f"/api/books/{book_id}", json={"class_groups": ["3rd Year A"]}, headers=admin.headers
        )
        assert response.json()["class_groups"] == ["3rd Year A"]

    def test_unknown_book(self, client, admin):
        response = client.put("/api/books/missing", json={"title": "X"}, headers=admin.headers)
        assert response.status_code == 404
        assert response.json()["error"] == "Book not found"

    def test_empty_required_field(self, client, admin):
        book_id = _create(client, admin).json()["id"]
        response = client.put(f"/api/books/{book_id}", json={"title": ""}, headers=admin.headers)
        assert response.status_code == 400

    def test_replaced_upload_is_deleted(self, client, admin, tmp_path):
        upload = client.post(
            "/api/upload/pdf",
            files={"pdf": ("old.pdf", b"%PDF-old", "application/pdf")},
            headers=admin.headers,
        ).json()
        book_id = _create(client, admin, pdf_url=upload["pdfUrl"]).json()["id"]
        old_file = tmp_path / "uploads" / "pdfs" / upload["filename"]
        assert old_file.exists()

        client.put(f"/api/books/{book_id}", json={"pdf_url": "/uploads/pdfs/new.pdf"}, headers=admin.headers)
        assert not old_file.exists()


class TestListBooks:
    """Tests for GET /api/books."""

    def test_search_is_case_insensitive_over_text_fields(self, client, admin, make_book):
        make_book(title="Cells and Life", component="Science")
        make_book(title="Numbers", author="Cellini")
        make_book(title="Maps", description="Nothing to see")

        data = client.get("/api/books?search=CELL", headers=admin.headers).json()
        assert [b["title"] for b in data["data"]] == ["Cells and Life", "Numbers"]
        assert data["total"] == 2

    def test_all_means_no_filter(self, client, admin, make_book):
        make_book(title="A", component="Mathematics")
        make_book(title="B", component="Science")

        data = client.get(
            "/api/books?curriculum_component=all&class_group=all", headers=admin.headers
        ).json()
        assert data["total"] == 2

    def test_component_and_class_filters(self, client, admin, make_book):
        make_book(title="A", component="Mathematics", class_groups=["1st Year A"])
        make_book(title="B", component="Mathematics", class_groups=["2nd Year A"])
        make_book(title="C", component="Science", class_groups=["1st Year A"])

        data = client.get(
            "/api/books?curriculum_component=Mathematics&class_group=1st Year A",
            headers=admin.headers,
        ).json()
        assert [b["title"] for b in data["data"]] == ["A"]

    def test_assigned_user_filters(self, client, admin, student, professor, make_book):
        mine = make_book(title="Assigned")
        make_book(title="Other")
        client.post("/api/assignments", json={"book_id": mine.id, "user_id": student.id}, headers=admin.headers)

        by_student = client.get(f"/api/books?student_id={student.id}", headers=admin.headers).json()
        assert [b["title"] for b in by_student["data"]] == ["Assigned"]

        by_professor = client.get(f"/api/books?professor_id={professor.id}", headers=admin.headers).json()
        assert by_professor["total"] == 0

    def test_pagination_clamp(self, client, admin, make_book):
        for i in range(3):
            make_book(title=f"Book {i}")
        data = client.get("/api/books?limit=1000", headers=admin.headers).json()
        assert data["limit"] == 100
        assert data["total"] == 3

    def test_book_without_tags_has_empty_list(self, client, admin, make_book):
        make_book(class_groups=None)
        data = client.get("/api/books", headers=admin.headers).json()
        assert data["data"][0]["class_groups"] == []


class TestStudentBooks:
    """Tests for GET /api/books/student/{user_id}."""

    def test_only_student_books_of_class(self, client, student, make_book):
        make_book(title="For Class", class_groups=["1st Year A"])
        make_book(title="Other Class", class_groups=["2nd Year A"])
        make_book(title="Guide", class_groups=["1st Year A"], book_type=BookType.PROFESSOR)

        response = client.get(f"/api/books/student/{student.id}", headers=student.headers)
        assert response.status_code == 200
        assert [b["title"] for b in response.json()] == ["For Class"]

    def test_student_without_class_group(self, client, make_user, make_book):
        loner = make_user(Role.STUDENT)
        make_book(class_groups=["1st Year A"])

        response = client.get(f"/api/books/student/{loner.id}", headers=loner.headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_unknown_user(self, client, admin):
        response = client.get("/api/books/student/missing", headers=admin.headers)
        assert response.status_code == 404


class TestBookLookups:
    def test_by_component_and_class(self, client, admin, make_book):
        make_book(title="A", component="History", class_groups=["3rd Year A"])
        make_book(title="B", component="Science", class_groups=["3rd Year A"])

        by_component = client.get("/api/books/component/History", headers=admin.headers).json()
        assert [b["title"] for b in by_component] == ["A"]

        by_class = client.get("/api/books/class/3rd Year A", headers=admin.headers).json()
        assert [b["title"] for b in by_class] == ["A", "B"]

    def test_get_unknown(self, client, admin):
        assert client.get("/api/books/missing", headers=admin.headers).status_code == 404


class TestDeleteBook:
    def test_delete_removes_tags_and_assignments(self, client, admin, student, make_book, db):
        book = make_book(class_groups=["1st Year A"])
        client.post("/api/assignments", json={"book_id": book.id, "user_id": student.id}, headers=admin.headers)

        response = client.delete(f"/api/books/{book.id}", headers=admin.headers)
        assert response.status_code == 200
        assert db.query("SELECT COUNT(*) AS n FROM book_class_groups")[0]["n"] == 0
        assert db.query("SELECT COUNT(*) AS n FROM book_assignments")[0]["n"] == 0

    def test_delete_unknown(self, client, admin):
        assert client.delete("/api/books/missing", headers=admin.headers).status_code == 404
