"""
Unit tests for the 'explore' command.
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from depex.cli.commands.explore import build_tree, explore, materialize
from depex.cli.main import main
from depex.core.engine import GraphEngine
from depex.core.exceptions import FetchError
from depex.core.types import GraphNode, NodeType
from depex.fetching.static import StaticFetcher

FLASK = "pkg:pypi/flask"

FIXTURE = {
    FLASK: {
        "nodes": [
            {"id": f"{FLASK}@1.0", "label": "1.0", "type": "Version", "props": {"purl": f"{FLASK}@1.0", "serial_number": 1}},
            {"id": f"{FLASK}@2.0", "label": "2.0", "type": "Version",
             "props": {"purl": f"{FLASK}@2.0", "serial_number": 2, "vulnerabilities": ["CVE-2024-1"]}},
        ],
        "edges": [
            {"id": "h1", "source": FLASK, "target": f"{FLASK}@1.0", "type": "HAVE"},
            {"id": "h2", "source": FLASK, "target": f"{FLASK}@2.0", "type": "HAVE"},
        ],
    },
    f"{FLASK}@1.0": {"nodes": [], "edges": []},
    f"{FLASK}@2.0": {
        "nodes": [{"id": "pkg:pypi/werkzeug", "label": "werkzeug", "type": "PyPIPackage"}],
        "edges": [{"id": "r1", "source": f"{FLASK}@2.0", "target": "pkg:pypi/werkzeug",
                   "type": "REQUIRE", "props": {"constraints": ">=3.0"}}],
    },
}


@pytest.fixture
def fixture_file(tmp_path):
    path = tmp_path / "graph.json"
    path.write_text(json.dumps(FIXTURE))
    return path


def invoke(*args):
    runner = CliRunner()
    return runner.invoke(explore, [FLASK, "--name", "flask", "-c", "missing.yaml", *args])


class TestExploreCommand:
    def test_human_output(self, fixture_file):
        result = invoke("--fixture", str(fixture_file), "--depth", "2")

        assert result.exit_code == 0
        assert "flask" in result.output
        assert "werkzeug" in result.output
        assert ">=3.0" in result.output
        assert "4 nodes, 3 edges" in result.output
        assert "1 vulnerabilities" in result.output

    def test_json_output(self, fixture_file):
        result = invoke("--fixture", str(fixture_file), "--json")

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["meta"]["status"] == "success"
        data = payload["data"]
        assert data["root_id"] == FLASK
        assert {n["id"] for n in data["graph"]["nodes"]} == {FLASK, f"{FLASK}@1.0", f"{FLASK}@2.0"}
        assert data["stats"]["version_nodes"] == 2
        assert data["failures"] == {}

    def test_depth_zero_only_seed(self, fixture_file):
        result = invoke("--fixture", str(fixture_file), "--depth", "0", "--json")

        data = json.loads(result.output)["data"]
        assert [n["id"] for n in data["graph"]["nodes"]] == [FLASK]
        assert data["graph"]["nodes"][0]["props"] == {"name": "flask", "purl": FLASK}

    def test_latest_only(self, fixture_file):
        result = invoke("--fixture", str(fixture_file), "--depth", "2", "--latest-only", "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert {n["id"] for n in data["graph"]["nodes"]} == {FLASK, f"{FLASK}@2.0", "pkg:pypi/werkzeug"}
        assert data["stats"]["total_nodes"] == 3

    def test_fetch_failures_are_reported(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps({}))

        result = invoke("--fixture", str(path), "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert FLASK in data["failures"]

    def test_invalid_config_json_error(self, tmp_path, fixture_file):
        config = tmp_path / "config.yaml"
        config.write_text("graph:\n  max_nodes: -1\n")

        runner = CliRunner()
        result = runner.invoke(explore, [FLASK, "--fixture", str(fixture_file), "-c", str(config), "--json"])

        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["meta"]["status"] == "error"
        assert payload["error"]["type"] == "ConfigError"

    def test_unknown_type_rejected(self):
        result = CliRunner().invoke(explore, [FLASK, "--type", "Bogus"])
        assert result.exit_code == 2

    @patch("depex.cli.commands.explore.DepexApiFetcher")
    def test_uses_api_without_fixture(self, mock_fetcher_cls):
        mock_fetcher = mock_fetcher_cls.return_value
        mock_fetcher.__aenter__.return_value = StaticFetcher(FIXTURE)

        result = invoke("--json")

        assert result.exit_code == 0
        mock_fetcher.__aexit__.assert_called_once()
        assert len(json.loads(result.output)["data"]["graph"]["nodes"]) == 3

    def test_registered_on_main_group(self):
        result = CliRunner().invoke(main, ["explore", "--help"])

        assert result.exit_code == 0
        assert "--latest-only" in result.output


class TestMaterialize:
    @pytest.mark.asyncio
    async def test_stops_at_node_limit(self):
        seed = GraphNode.seed(FLASK, "flask", NodeType.PYPI_PACKAGE)

        response = await materialize(seed, StaticFetcher(FIXTURE), depth=5, max_nodes=2)

        assert response.limit_reached
        assert response.stats.total_nodes == 3

    @pytest.mark.asyncio
    async def test_failures_keyed_by_node(self, fetcher, seed):
        fetcher.errors["pkg:foo"] = FetchError("backend down")

        response = await materialize(seed, fetcher, depth=2, max_nodes=200)

        assert response.failures == {"pkg:foo": "backend down"}
        assert response.graph.node_count == 1


class TestBuildTree:
    @pytest.mark.asyncio
    async def test_shared_nodes_rendered_once(self, fetcher, seed):
        fetcher.fragments["pkg:foo"] = {
            "nodes": [{"id": "pkg:a"}, {"id": "pkg:b"}],
            "edges": [
                {"id": "1", "source": "pkg:foo", "target": "pkg:a", "type": "DEPENDS_ON"},
                {"id": "2", "source": "pkg:foo", "target": "pkg:b", "type": "DEPENDS_ON"},
                {"id": "3", "source": "pkg:a", "target": "pkg:b", "type": "DEPENDS_ON"},
            ],
        }
        engine = GraphEngine(seed, fetcher)
        await engine.expand("pkg:foo")

        tree = build_tree(engine.graph, "pkg:foo")

        assert len(tree.children) == 2
        first, second = tree.children
        assert [str(c.label) for c in second.children] == []
        assert len(first.children) == 1
        assert "(shown elsewhere)" in str(first.children[0].label)
