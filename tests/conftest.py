"""Shared fixtures: a small relationship response and the graph built from it."""

import copy

import pytest

from ipgraph.graph.builder import build_graph

SAMPLE_RESPONSE = {
    "root": {
        "ipId": "root1",
        "title": "Root IP",
        "description": "The original work",
        "createdAt": "2024-01-01T00:00:00Z",
    },
    "ancestors": [
        {
            "ipId": "anc1",
            "title": "Ancestor 1",
            "relationshipType": "adaptation",
            "relationshipId": "rel0",
            "direction": "inbound",
            "distance": 1,
            "createdAt": "2023-06-01T00:00:00Z",
        },
    ],
    "derivatives": [
        {
            "ipId": "deriv1",
            "title": "Derivative 1",
            "relationshipType": "remix",
            "relationshipId": "rel1",
            "direction": "outbound",
            "distance": 1,
            "approvalStatus": "approved",
            "createdAt": "2024-03-01T00:00:00Z",
            "metadata": {"tags": ["music"]},
        },
        {
            "ipId": "deriv2",
            "title": "Derivative 2",
            "relationshipType": "sequel",
            "relationshipId": "rel2",
            "direction": "outbound",
            "distance": 2,
            "approvalStatus": "pending",
            "createdAt": "2024-09-01T00:00:00Z",
        },
    ],
    "related": [
        {
            "ipId": "related1",
            "title": "Related IP",
            "relationshipType": "reference",
            "relationshipId": "rel3",
            "distance": 1,
        },
    ],
    "metadata": {"totalRelationships": 4, "directRelationships": 4},
}


@pytest.fixture
def sample_response():
    return copy.deepcopy(SAMPLE_RESPONSE)


@pytest.fixture
def sample_graph(sample_response):
    return build_graph(sample_response)
