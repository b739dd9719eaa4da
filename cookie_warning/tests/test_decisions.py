"""Tests for the decision engine: enable flag, dismissal, geo-targeting."""

from unittest.mock import patch

import pytest

from cookie_warning.context import User
from cookie_warning.services.decisions import Decisions
from cookie_warning.services.geolocation import UNKNOWN_REGION
from cookie_warning.services.preferences import PreferenceStore
from cookie_warning.tests.conftest import StubGeoLocation, make_config, make_context


def _decisions(region=UNKNOWN_REGION, **config):
    geo = StubGeoLocation(region)
    return Decisions(make_config(**config), geo, PreferenceStore()), geo


class TestEnabledFlag:
    @pytest.mark.parametrize("cookies, allow_list", [
        ({}, {}),
        ({"cookiewarning_dismissed": "true"}, {}),
        ({}, {"US": "United States of America"}),
    ])
    def test_disabled_is_always_hidden(self, fake_db, cookies, allow_list):
        decisions, _ = _decisions("US", enabled=False, country_allow_list=allow_list)
        assert decisions.should_show_cookie_warning(make_context(cookies=cookies)) is False

    def test_enabled_without_allow_list_shows(self, fake_db):
        decisions, geo = _decisions()
        assert decisions.should_show_cookie_warning(make_context()) is True
        assert geo.calls == []


class TestDismissal:
    def test_cookie_hides(self, fake_db):
        decisions, _ = _decisions()
        ctx = make_context(cookies={"cookiewarning_dismissed": "true"})
        assert decisions.should_show_cookie_warning(ctx) is False

    def test_legacy_numeric_cookie_hides(self, fake_db):
        decisions, _ = _decisions()
        ctx = make_context(cookies={"cookiewarning_dismissed": "1"})
        assert decisions.should_show_cookie_warning(ctx) is False

    def test_zero_cookie_does_not_hide(self, fake_db):
        decisions, _ = _decisions()
        ctx = make_context(cookies={"cookiewarning_dismissed": "0"})
        assert decisions.should_show_cookie_warning(ctx) is True

    def test_preference_hides_for_logged_in_user(self, fake_db):
        fake_db.store["cookiewarning_user_preferences"].append({
            "user_name": "Alice", "name": "cookiewarning_dismissed", "value": "1",
        })
        decisions, _ = _decisions()
        assert decisions.should_show_cookie_warning(make_context(user=User("Alice"))) is False

    def test_other_users_preference_does_not_count(self, fake_db):
        fake_db.store["cookiewarning_user_preferences"].append({
            "user_name": "Alice", "name": "cookiewarning_dismissed", "value": "1",
        })
        decisions, _ = _decisions()
        assert decisions.should_show_cookie_warning(make_context(user=User("Bob"))) is True

    def test_unreadable_preference_hides(self, fake_db):
        decisions, _ = _decisions()
        with patch("cookie_warning.supabase_client.get_user_preference",
                   side_effect=RuntimeError("connection refused")):
            assert decisions.should_show_cookie_warning(make_context(user=User("Alice"))) is False

    def test_dismissed_skips_geolocation(self, fake_db):
        decisions, geo = _decisions("US", country_allow_list={"US": "United States"})
        decisions.should_show_cookie_warning(
            make_context(cookies={"cookiewarning_dismissed": "true"}))
        assert geo.calls == []


class TestGeoTargeting:
    def test_region_in_allow_list_shows(self, fake_db):
        decisions, geo = _decisions("US", country_allow_list={"US": "United States of America"})
        assert decisions.should_show_cookie_warning(make_context(ip="8.8.8.8")) is True
        assert geo.calls == ["8.8.8.8"]

    def test_region_outside_allow_list_hides(self, fake_db):
        decisions, _ = _decisions("US", country_allow_list={"EU": "European Union"})
        assert decisions.should_show_cookie_warning(make_context()) is False

    def test_unknown_region_never_matches(self, fake_db):
        decisions, _ = _decisions(UNKNOWN_REGION, country_allow_list={"US": "United States"})
        assert decisions.should_show_cookie_warning(make_context()) is False


class TestClientComponents:
    def test_off_without_allow_list(self):
        decisions, _ = _decisions()
        assert decisions.should_add_client_components() is False

    def test_on_with_allow_list(self):
        decisions, _ = _decisions(country_allow_list={"US": "United States"})
        assert decisions.should_add_client_components() is True

    def test_verdict_bundles_both(self, fake_db):
        decisions, _ = _decisions("EU", country_allow_list={"US": "United States"})
        verdict = decisions.verdict(make_context())
        assert verdict.show is False
        assert verdict.enable_geo_script is True
