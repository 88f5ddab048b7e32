from storefront.version import VERSION


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/v1/_info").json() == {"service": "storefront", "version": VERSION}


def test_metrics_exposed(client):
    assert client.get("/metrics").status_code == 200
