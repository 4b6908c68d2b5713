"""
Integration Tests for Routes

Drives the FastAPI application through TestClient to check status codes and
JSON bodies for every endpoint.
"""

import os


BLOG = {
    "title": "A",
    "description": "d",
    "content": "c",
    "slug": "a",
    "date": "2024-01-01",
}


class TestHealthRoutes:
    """Test liveness endpoints."""

    def test_health_check(self, client):
        """Test: /test reports the server is working."""
        response = client.get("/test")
        assert response.status_code == 200
        assert response.json() == {"status": "Server is working"}

    def test_cron_ping(self, client):
        """Test: /api/cron returns a UTC timestamp."""
        response = client.get("/api/cron")
        body = response.json()

        assert response.status_code == 200
        assert body["status"] == "success"
        assert body["message"] == "Cron job executed successfully"
        assert body["timestamp"].endswith("Z")

    def test_cors_preflight(self, client):
        """Test: Browser preflight from any origin is allowed."""
        response = client.options("/api/send-email", headers={
            "Origin": "https://goldstarbondcleaning.example",
            "Access-Control-Request-Method": "POST",
        })
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"


class TestBookingRoutes:
    """Test booking email endpoints."""

    def test_send_email(self, client, mailer):
        """Test: Full booking is mailed and acknowledged."""
        response = client.post("/api/send-email", json={
            "name": "Jane",
            "email": "jane@example.com",
            "suburb": "Southport",
            "propertyType": "House",
            "bedrooms": 4,
        })

        assert response.status_code == 200
        assert response.json() == {"message": "Email sent successfully"}
        assert len(mailer.sent) == 1
        assert "• Bedrooms: 4" in mailer.sent[0].text
        assert mailer.sent[0].to == "staff@goldstar.test"

    def test_send_email_without_body(self, client, mailer):
        """Test: An empty booking is still forwarded."""
        response = client.post("/api/send-email")

        assert response.status_code == 200
        assert len(mailer.sent) == 1

    def test_send_email_failure(self, client, mailer):
        """Test: Transport failure returns 500 with details."""
        mailer.fail_with = "SMTP down"

        response = client.post("/api/send-email", json={"email": "jane@example.com"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send email", "details": "SMTP down"}

    def test_quick_booking(self, client, mailer):
        """Test: Quick booking with only an email succeeds."""
        response = client.post("/api/quick-booking", json={"email": "x@y.com"})

        assert response.status_code == 200
        assert response.json() == {"message": "Quick booking email sent successfully"}
        assert "Not provided" in mailer.sent[0].text

    def test_quick_booking_requires_email(self, client, mailer):
        """Test: Missing email returns 400."""
        response = client.post("/api/quick-booking", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Email is required"}
        assert mailer.sent == []

    def test_quick_booking_failure(self, client, mailer):
        """Test: Transport failure returns 500 with details."""
        mailer.fail_with = "timed out"

        response = client.post("/api/quick-booking", json={"email": "x@y.com", "phone": "0400"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send quick booking email", "details": "timed out"}


class TestBlogRoutes:
    """Test blog CRUD endpoints."""

    def test_list_empty(self, client):
        """Test: No posts returns an empty array."""
        response = client.get("/api/blogs")
        assert response.status_code == 200
        assert response.json() == []

    def test_create_json(self, client):
        """Test: JSON create returns 201 with id and no image."""
        response = client.post("/api/blogs", json=BLOG)
        body = response.json()

        assert response.status_code == 201
        assert body["id"]
        assert body["title"] == "A"
        assert body["slug"] == "a"
        assert body["date"].startswith("2024-01-01")
        assert body["image"] is None

    def test_create_missing_field(self, client):
        """Test: Missing required field returns 400 with a message."""
        response = client.post("/api/blogs", json={"title": "A"})

        assert response.status_code == 400
        assert "description" in response.json()["message"]

    def test_create_invalid_json(self, client):
        """Test: Malformed JSON returns 400."""
        response = client.post(
            "/api/blogs",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400

    def test_create_with_inline_image(self, client, image_factory, data_uri, open_jpeg):
        """Test: Inline base64 image is returned normalized."""
        response = client.post("/api/blogs", json={**BLOG, "image": data_uri(image_factory(1600, 800))})

        assert response.status_code == 201
        assert open_jpeg(response.json()["image"]).size == (800, 400)

    def test_create_multipart_with_file(self, client, settings, image_factory, open_jpeg):
        """Test: Multipart form with an image file is accepted and staging cleaned."""
        response = client.post(
            "/api/blogs",
            data=BLOG,
            files={"image": ("house.png", image_factory(1200, 900), "image/png")},
        )

        assert response.status_code == 201
        assert open_jpeg(response.json()["image"]).size == (800, 600)
        assert os.listdir(settings.BLOG_UPLOAD_DIR) == []

    def test_create_multipart_non_image_file(self, client, settings):
        """Test: A non-image upload is rejected with 400."""
        response = client.post(
            "/api/blogs",
            data=BLOG,
            files={"image": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Not an image! Please upload an image."}
        assert client.get("/api/blogs").json() == []

    def test_create_bad_image(self, client, data_uri):
        """Test: Undecodable image returns 400 and stores nothing."""
        response = client.post("/api/blogs", json={**BLOG, "image": data_uri(b"not an image")})

        assert response.status_code == 400
        assert client.get("/api/blogs").json() == []

    def test_get_by_slug(self, client):
        """Test: Created post is retrievable by slug."""
        created = client.post("/api/blogs", json=BLOG).json()

        response = client.get("/api/blogs/a")
        assert response.status_code == 200
        assert response.json() == created

    def test_get_unknown_slug(self, client):
        """Test: Unknown slug returns 404."""
        response = client.get("/api/blogs/missing")
        assert response.status_code == 404
        assert response.json() == {"message": "Blog post not found"}

    def test_list_newest_first(self, client):
        """Test: Listing is sorted by date descending."""
        client.post("/api/blogs", json={**BLOG, "slug": "older", "date": "2023-01-01"})
        client.post("/api/blogs", json={**BLOG, "slug": "newer", "date": "2024-06-01"})

        slugs = [b["slug"] for b in client.get("/api/blogs").json()]
        assert slugs == ["newer", "older"]

    def test_patch(self, client):
        """Test: PATCH changes only the sent fields."""
        created = client.post("/api/blogs", json=BLOG).json()

        response = client.patch(f"/api/blogs/{created['id']}", json={"content": "updated"})

        assert response.status_code == 200
        fetched = client.get("/api/blogs/a").json()
        assert fetched["content"] == "updated"
        assert fetched["title"] == created["title"]
        assert fetched["description"] == created["description"]
        assert fetched["date"] == created["date"]

    def test_patch_multipart_image(self, client, image_factory, open_jpeg):
        """Test: PATCH with an uploaded file replaces the image."""
        created = client.post("/api/blogs", json=BLOG).json()

        response = client.patch(
            f"/api/blogs/{created['id']}",
            files={"image": ("new.png", image_factory(500, 250), "image/png")},
        )

        assert response.status_code == 200
        assert open_jpeg(response.json()["image"]).size == (500, 250)

    def test_patch_unknown(self, client):
        """Test: PATCH on a missing id returns 404."""
        response = client.patch("/api/blogs/unknown", json={"title": "x"})
        assert response.status_code == 404

    def test_patch_invalid(self, client):
        """Test: PATCH that blanks a required field returns 400."""
        created = client.post("/api/blogs", json=BLOG).json()

        response = client.patch(f"/api/blogs/{created['id']}", json={"slug": ""})
        assert response.status_code == 400

    def test_delete(self, client):
        """Test: DELETE removes the post permanently."""
        created = client.post("/api/blogs", json=BLOG).json()

        response = client.delete(f"/api/blogs/{created['id']}")
        assert response.status_code == 200
        assert response.json() == {"message": "Blog post deleted"}

        assert client.get("/api/blogs/a").status_code == 404
        assert client.patch(f"/api/blogs/{created['id']}", json={"title": "x"}).status_code == 404
        assert client.delete(f"/api/blogs/{created['id']}").status_code == 404


class TestBookingSiteScenario:
    """End-to-end walk through blog creation and both booking forms."""

    def test_scenario(self, client, mailer):
        """Test: Create post, quick booking without phone, quick booking without email."""
        response = client.post("/api/blogs", json=BLOG)
        assert response.status_code == 201
        assert response.json()["image"] is None

        response = client.post("/api/quick-booking", json={"email": "x@y.com"})
        assert response.status_code == 200
        assert "Not provided" in mailer.sent[-1].text

        response = client.post("/api/quick-booking", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Email is required"}


class TestStaticUploads:
    """Test the read-only uploads mount."""

    def test_serves_uploaded_file(self, client, settings):
        """Test: Files in the upload directory are served under /uploads."""
        with open(os.path.join(settings.UPLOAD_DIR, "logo.txt"), "w") as f:
            f.write("gold star")

        response = client.get("/uploads/logo.txt")
        assert response.status_code == 200
        assert response.text == "gold star"

    def test_missing_file(self, client):
        """Test: Unknown files return 404."""
        assert client.get("/uploads/nope.png").status_code == 404
