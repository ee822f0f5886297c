import pytest

from crmsync.routes.pages import feature_label

from tests.conftest import make_settings


@pytest.mark.parametrize("path", ["/campaigns", "/campaigns/42/edit", "/Analytics"])
def test_locked_sections_redirect(client, path):
    resp = client.get(path)

    assert resp.status_code == 302
    feature = path.strip("/").split("/")[0].lower()
    assert resp.headers["Location"].endswith(f"/locked/{feature}")


def test_locked_page_content(client):
    resp = client.get("/campaigns", follow_redirects=True)

    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert "Feature Locked" in html
    assert "<strong>Campaigns</strong>" in html
    assert "Go Back" in html
    assert "Go to Dashboard" in html


def test_dashboard_is_reachable(client, make_lead):
    make_lead(email="a@x.com", status="Inactive")
    make_lead(email="b@x.com")

    resp = client.get("/")

    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert '<span id="total-leads">2</span>' in html
    assert '<span id="inactive-leads">1</span>' in html


def test_post_is_not_gated(client):
    # las rutas de API no pasan por el bloqueo
    assert client.post("/campaigns").status_code == 404


def test_locked_list_comes_from_settings():
    from crmsync import create_app
    from crmsync.database import db

    app = create_app(make_settings(locked_features=("reports",)))
    with app.app_context():
        c = app.test_client()
        assert c.get("/reports").status_code == 302
        assert c.get("/campaigns").status_code == 404
        db.session.remove()


def test_feature_label():
    assert feature_label("email-templates") == "Email Templates"
