"""HTTP surface tests with the detector dependency replaced."""

import json

import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient

from photobooth.config import Settings, get_settings
from photobooth.detector import StaticDetector
from photobooth.geometry import FaceDetectionResult
from photobooth.main import app, get_detector


def _png(image):
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return buffer.tobytes()


@pytest.fixture
def detector(make_detection):
    return StaticDetector(FaceDetectionResult((make_detection(),)))


@pytest.fixture
def client(detector):
    app.dependency_overrides[get_detector] = lambda: detector
    app.dependency_overrides[get_settings] = lambda: Settings(random_seed=3)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def photo():
    return _png(np.full((480, 640, 3), 120, dtype=np.uint8))


class TestCatalogEndpoints:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_decorations(self, client):
        body = client.get("/api/decorations").json()
        assert len(body) == 30
        assert {"id": "crown", "name": "クラウン", "category": "head"} in body

    def test_filters(self, client):
        body = {f["id"]: f for f in client.get("/api/filters").json()}
        assert body["film"]["css"] == "contrast(1.15) saturate(1.3) brightness(0.92) sepia(15%)"
        assert body["film"]["hasPixelPass"] is True
        assert body["mono"]["hasPixelPass"] is False

    def test_frames(self, client):
        assert [f["id"] for f in client.get("/api/frames").json()] == ["classic", "gold", "silver", "colorful"]


class TestDetectEndpoint:
    def test_returns_detections(self, client, photo):
        response = client.post("/api/detect", files={"image": ("photo.png", photo, "image/png")})
        assert response.status_code == 200
        body = response.json()
        assert (body["width"], body["height"]) == (640, 480)
        assert body["detections"][0]["box"]["xCenter"] == pytest.approx(0.5)
        assert len(body["detections"][0]["landmarks"]) == 6

    def test_rejects_garbage(self, client):
        response = client.post("/api/detect", files={"image": ("x.png", b"nope", "image/png")})
        assert response.status_code == 400


class TestCaptureEndpoint:
    def _capture(self, client, photo, config=None, frame=None):
        files = {"image": ("photo.png", photo, "image/png")}
        if frame is not None:
            files["frame"] = ("frame.png", frame, "image/png")
        data = {"captureConfig": json.dumps(config)} if config is not None else {}
        return client.post("/api/capture", files=files, data=data)

    def test_defaults(self, client, photo, detector):
        response = self._capture(client, photo)
        assert response.status_code == 200
        body = response.json()
        assert (body["width"], body["height"]) == (640, 480)
        assert body["image"].startswith("data:image/jpeg;base64,")
        assert body["filename"].startswith("ShinagawaPrince_Photo_")
        assert body["filename"].endswith(".jpg")
        assert detector.calls == 0

    def test_full_config(self, client, photo, detector):
        config = {
            "filter": "film",
            "decoration": "crown",
            "frame": "gold",
            "message": {"text": {"enabled": True, "value": "Hi"}},
            "label": "Sky",
            "format": "png",
        }
        response = self._capture(client, photo, config)
        assert response.status_code == 200
        body = response.json()
        assert body["image"].startswith("data:image/png;base64,")
        assert body["filename"].startswith("ShinagawaPrince_Sky_")
        assert body["captionLines"] == ["Hi"]
        assert body["faceCount"] == 1
        assert detector.calls == 1

    def test_client_supplied_detections(self, client, photo, detector):
        config = {
            "decoration": "glasses",
            "detections": [{"box": {"xCenter": 0.4, "yCenter": 0.5, "width": 0.2, "height": 0.25}}],
        }
        response = self._capture(client, photo, config)
        assert response.status_code == 200
        assert response.json()["faceCount"] == 1
        assert detector.calls == 0

    def test_uploaded_frame(self, client, photo):
        overlay = np.zeros((480, 640, 4), dtype=np.uint8)
        overlay[:20] = (0, 0, 255, 255)
        response = self._capture(client, photo, {"format": "png"}, frame=_png(overlay))
        assert response.status_code == 200

    @pytest.mark.parametrize(
        "config",
        [{"filter": "hdr"}, {"decoration": "jetpack"}, {"frame": "neon"}, {"userFacing": "sideways"}],
    )
    def test_bad_config(self, client, photo, config):
        assert self._capture(client, photo, config).status_code == 400

    def test_invalid_json(self, client, photo):
        response = client.post(
            "/api/capture",
            files={"image": ("photo.png", photo, "image/png")},
            data={"captureConfig": "{not json"},
        )
        assert response.status_code == 400

    def test_unreadable_image(self, client):
        response = self._capture(client, b"\x00\x01", {})
        assert response.status_code == 400
