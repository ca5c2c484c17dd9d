import pytest

from config import settings
from utils.uploads import UnsafeUploadPath, plan_filenames, safe_segment


def test_plan_first_upload_takes_base_name():
    assert plan_filenames([], "divan", ["jpg", "png", "jpg"]) == ["divan.jpg", "divan-1.png", "divan-2.jpg"]


def test_plan_continues_numbering():
    existing = ["divan.jpg", "divan-1.jpg", "divan-4.webp", "other-9.jpg"]
    assert plan_filenames(existing, "divan", ["jpg", "jpg"]) == ["divan-5.jpg", "divan-6.jpg"]


def test_plan_base_free_but_numbers_taken():
    assert plan_filenames(["divan-2.jpg"], "divan", ["jpg", "jpg"]) == ["divan.jpg", "divan-3.jpg"]


@pytest.mark.parametrize("value", ["../etc", "a/b", "..", "x y"])
def test_unsafe_segments_are_rejected(value):
    with pytest.raises(UnsafeUploadPath):
        safe_segment(value, "default")


def test_blank_segment_uses_fallback():
    assert safe_segment("", "file") == "file"


@pytest.fixture
def upload_root(tmp_path, monkeypatch):
    root = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(root))
    return root


def _images(*names):
    return [("images", (name, b"\x89PNG fake", "image/png")) for name in names]


def test_upload_requires_admin(client, upload_root):
    response = client.post("/api/upload-images", data={"folderSlug": "beds"}, files=_images("a.png"))
    assert response.status_code == 401


def test_upload_images(admin_client, upload_root):
    response = admin_client.post(
        "/api/upload-images",
        data={"folderSlug": "beds", "productSlug": "bed-milan"},
        files=_images("front.png", "side.png"),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Images uploaded successfully"
    assert [img["url"] for img in body["uploadedImages"]] == [
        "/uploads/beds/bed-milan.png",
        "/uploads/beds/bed-milan-1.png",
    ]
    assert body["uploadedImages"][0]["filename"] == "front.png"
    assert (upload_root / "beds" / "bed-milan-1.png").read_bytes() == b"\x89PNG fake"

    again = admin_client.post(
        "/api/upload-images",
        data={"folderSlug": "beds", "productSlug": "bed-milan"},
        files=_images("back.png"),
    ).json()
    assert again["uploadedImages"][0]["url"] == "/uploads/beds/bed-milan-2.png"


def test_upload_without_slugs_uses_defaults(admin_client, upload_root):
    body = admin_client.post("/api/upload-images", files=_images("x.png")).json()
    assert body["uploadedImages"][0]["url"] == "/uploads/default/file.png"


def test_upload_rejects_unsafe_folder(admin_client, upload_root):
    response = admin_client.post(
        "/api/upload-images",
        data={"folderSlug": "../../etc", "productSlug": "x"},
        files=_images("a.png"),
    )
    assert response.status_code == 400
    assert not (upload_root.parent / "etc").exists()


def test_upload_rejects_non_images(admin_client, upload_root):
    response = admin_client.post(
        "/api/upload-images",
        files=[("images", ("notes.txt", b"hello", "text/plain"))],
    )
    assert response.status_code == 400
