"""
Frontend page tests for the Campus Grievance Desk admin dashboard.

Verifies that the Jinja2-rendered admin page responds with HTML and carries
the filter panel controls.
"""

import pytest

pytestmark = pytest.mark.asyncio


# ═══════════════════════════════════════════════════════════════════════════════
# ADMIN PAGE
# ═══════════════════════════════════════════════════════════════════════════════

class TestAdminPage:
    async def test_page_returns_200(self, client):
        resp = await client.get("/admin")
        assert resp.status_code == 200
        assert "text/html" in resp.headers.get("content-type", "")

    async def test_page_contains_html_structure(self, client):
        text = (await client.get("/admin")).text.lower()
        assert "<!doctype html>" in text
        assert "</html>" in text

    async def test_filter_selects_present(self, client):
        text = (await client.get("/admin")).text
        for name in ("department", "status", "month", "year"):
            assert f'<select name="{name}">' in text
        for label in ("All Departments", "All Statuses", "All Months", "All Years"):
            assert label in text

    async def test_filter_options_rendered(self, client):
        text = (await client.get("/admin")).text
        assert '<option value="Computer Science">Computer Science</option>' in text
        assert '<option value="resolved">Resolved</option>' in text
        assert '<option value="12">December</option>' in text

    async def test_clear_filters_button(self, client):
        text = (await client.get("/admin")).text
        assert 'id="clear-filters"' in text
        assert "Clear Filters" in text

    async def test_login_form_present(self, client):
        text = (await client.get("/admin")).text
        assert 'id="login-form"' in text
        assert 'name="email"' in text
        assert 'type="password"' in text

    async def test_page_script_signs_in_and_stores_token(self, client):
        text = (await client.get("/admin")).text
        assert 'fetch("/api/auth/login"' in text
        assert "localStorage.setItem(TOKEN_KEY, body.access_token)" in text
        assert 'const TOKEN_KEY = "token";' in text

    async def test_assign_failure_reloads_table(self, client):
        text = (await client.get("/admin")).text
        assign_fn = text[text.index("async function assign("):]
        assert "catch (err)" in assign_fn
        assert "finally" in assign_fn
        assert "await load();" in assign_fn
