"""Tests for routing form route matching and the virtual queues insights endpoint."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from bookline.domain.routing_forms.service import find_matching_route
from bookline.models import RoutingForm
from bookline.shared.dates import start_of_month

from tests.conftest import add_member, auth_headers, make_booking, make_team, make_user

FORM_ID = "948ae412-d995-4865-885a-48302588de03"


def contains(field, *values):
    return {
        "id": "root",
        "type": "group",
        "children1": {
            "r1": {
                "type": "rule",
                "properties": {"field": field, "operator": "multiselect_contains", "value": [list(values)]},
            }
        },
    }


@pytest.fixture
def team_setup(db):
    team = make_team(db, "Sales")
    alice = make_user(db, "alice@example.com", name="Alice")
    bob = make_user(db, "bob@example.com", name="Bob")
    carol = make_user(db, "carol@example.com", name="Carol")
    add_member(db, team, alice, attributes={"languages": ["en", "de"]})
    add_member(db, team, bob, attributes={"languages": ["en"]})
    add_member(db, team, carol, attributes={"languages": ["fr"]})

    form = RoutingForm(
        id=FORM_ID,
        name="Sales inquiry",
        team_id=team.id,
        routes=[
            {"id": "english", "attributesQueryValue": contains("languages", "en")},
            {"id": "everyone", "attributesQueryValue": {"id": "root", "type": "group"}},
            {"id": "no-attributes", "queryValue": {"id": "root", "type": "group"}},
            {"id": "fallback", "isFallback": True, "attributesQueryValue": contains("languages", "fr")},
        ],
    )
    db.add(form)
    db.commit()
    return team, alice, bob, carol


class TestVirtualQueues:
    async def test_members_ordered_by_bookings_this_month(self, client: AsyncClient, db, team_setup):
        _, alice, bob, carol = team_setup
        month_start = start_of_month()
        for day in (1, 2):
            make_booking(db, alice, month_start + timedelta(days=day, hours=9))
        make_booking(db, bob, month_start + timedelta(days=3, hours=9))
        # Last month's bookings do not count
        for day in (1, 2, 3):
            make_booking(db, bob, month_start - timedelta(days=day))

        response = await client.get(
            f"/insights/routing-forms/{FORM_ID}/virtual-queues", headers=auth_headers(alice)
        )

        assert response.status_code == 200
        queues = response.json()
        assert [q["routeId"] for q in queues] == ["english", "everyone"]

        english = queues[0]
        assert [m["email"] for m in english["matchingMembers"]] == ["bob@example.com", "alice@example.com"]
        assert english["perUserData"] == [
            {"userId": bob.id, "bookingsCount": 1},
            {"userId": alice.id, "bookingsCount": 2},
        ]

        everyone = queues[1]
        assert [m["id"] for m in everyone["matchingMembers"]] == [carol.id, bob.id, alice.id]

    async def test_unknown_form(self, client: AsyncClient, db, team_setup):
        _, alice, _, _ = team_setup

        response = await client.get(
            "/insights/routing-forms/00000000-0000-0000-0000-000000000000/virtual-queues",
            headers=auth_headers(alice),
        )

        assert response.status_code == 404

    async def test_malformed_form_id(self, client: AsyncClient, db, team_setup):
        _, alice, _, _ = team_setup

        response = await client.get("/insights/routing-forms/not-a-uuid/virtual-queues", headers=auth_headers(alice))

        assert response.status_code == 404

    async def test_outsiders_are_forbidden(self, client: AsyncClient, db, team_setup):
        outsider = make_user(db, "mallory@example.com")

        response = await client.get(
            f"/insights/routing-forms/{FORM_ID}/virtual-queues", headers=auth_headers(outsider)
        )

        assert response.status_code == 403

    async def test_requires_authentication(self, client: AsyncClient, team_setup):
        response = await client.get(f"/insights/routing-forms/{FORM_ID}/virtual-queues")

        assert response.status_code in (401, 403)


class TestFindMatchingRoute:
    def test_first_matching_route_wins(self):
        form = RoutingForm(
            routes=[
                {"id": "fallback", "isFallback": True},
                {
                    "id": "enterprise",
                    "queryValue": {
                        "type": "group",
                        "children1": [
                            {"type": "rule", "properties": {"field": "size", "operator": "greater", "value": [100]}}
                        ],
                    },
                },
                {"id": "catch-all", "queryValue": {"type": "group", "children1": []}},
            ]
        )

        assert find_matching_route(form, {"size": 500})["id"] == "enterprise"
        assert find_matching_route(form, {"size": 5})["id"] == "catch-all"

    def test_fallback_when_nothing_matches(self):
        form = RoutingForm(
            routes=[
                {
                    "id": "germany",
                    "queryValue": {
                        "type": "group",
                        "children1": [
                            {
                                "type": "rule",
                                "properties": {"field": "country", "operator": "select_equals", "value": ["DE"]},
                            }
                        ],
                    },
                },
                {"id": "fallback", "isFallback": True},
            ]
        )

        assert find_matching_route(form, {"country": "FR"})["id"] == "fallback"
