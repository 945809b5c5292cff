from starlette.testclient import TestClient

from keylab.app import app
from keylab.obs.prom import algorithm_label


def test_metrics_exposed_after_operations():
    client = TestClient(app)
    client.post("/api/crypto/generate-keys", json={"algorithm": "Ed25519"})
    client.post("/api/crypto/encrypt", json={"algorithm": "X25519", "message": "m", "publicKey": "k"})
    r = client.get("/metrics")
    assert r.status_code == 200
    text = r.text
    assert "keylab_operations_total" in text
    assert 'operation="generate"' in text
    assert 'result="UnsupportedOperation"' in text
    assert "keylab_operation_latency_ms_bucket" in text


def test_algorithm_label_is_bounded():
    assert algorithm_label("ed25519") == "Ed25519"
    assert algorithm_label("not-an-alg") == "unknown"
    assert algorithm_label(None) == "unknown"
