"""Tests for single-root dependency graph discovery."""

from __future__ import annotations

import pytest

from abapgraph.graph.dag_builder import DagBuilder, build_dependency_graph
from abapgraph.models.graph import DagResult, MemberReference
from abapgraph.models.types import MemberType, ObjectType
from tests.fixtures.abap.fake_system import FakeAbapSystem, chain_system, dep


async def _build(
    system: FakeAbapSystem,
    root: str = "ZCL_A",
    root_type: ObjectType | str = ObjectType.CLAS,
    max_nodes: int = 50,
) -> DagResult:
    return await build_dependency_graph(
        root,
        root_type,
        fetcher=system,
        extractor=system,
        resolver=system,
        max_nodes=max_nodes,
    )


def assert_graph_invariants(result: DagResult) -> None:
    """Structural guarantees every DagResult must satisfy."""
    node_map = result.node_map
    keys = [edge.key for edge in result.edges]

    assert len(keys) == len(set(keys)), "duplicate (from, to) edges"
    for edge in result.edges:
        assert edge.source in node_map, f"dangling source {edge.source}"
        assert edge.target in node_map, f"dangling target {edge.target}"
        assert edge.source != edge.target, "self-edge"

    for node in result.nodes:
        expected = {edge.source for edge in result.edges if edge.target == node.name}
        assert set(node.used_by) == expected
        assert len(node.used_by) == len(set(node.used_by))

    assert sorted(result.topological_order) == sorted(node_map)


def _names(result: DagResult) -> set[str]:
    return {node.name for node in result.nodes}


class TestBasicDiscovery:
    """Tests for straightforward graphs."""

    @pytest.mark.asyncio
    async def test_chain(self) -> None:
        """A -> B -> C yields all three nodes, leaves first."""
        result = await _build(chain_system())

        assert result.root == "ZCL_A"
        assert _names(result) == {"ZCL_A", "ZCL_B", "ZCL_C"}
        assert result.topological_order == ["ZCL_C", "ZCL_B", "ZCL_A"]
        assert result.node_map["ZCL_B"].used_by == ["ZCL_A"]
        assert result.node_map["ZCL_C"].used_by == ["ZCL_B"]
        assert result.node_map["ZCL_A"].used_by == []
        assert result.errors == []
        assert_graph_invariants(result)

    @pytest.mark.asyncio
    async def test_custom_nodes_carry_source(self) -> None:
        result = await _build(chain_system())

        node = result.node_map["ZCL_B"]
        assert node.is_custom
        assert node.source_available
        assert node.source == "* source of ZCL_B"
        assert node.type is ObjectType.CLAS

    @pytest.mark.asyncio
    async def test_root_name_normalized(self) -> None:
        """Identity is case-insensitive from the root onwards."""
        result = await _build(chain_system(), root="zcl_a", root_type="clas/oc")

        assert result.root == "ZCL_A"
        assert result.node_map["ZCL_A"].type is ObjectType.CLAS

    @pytest.mark.asyncio
    async def test_lowercase_dependency_names_match(self) -> None:
        system = FakeAbapSystem(
            dependencies={"ZCL_A": [dep("zcl_b", "CLAS")], "ZCL_B": [dep("zcl_a", "CLAS")]},
        )

        result = await _build(system)

        assert _names(result) == {"ZCL_A", "ZCL_B"}
        assert len(result.edges) == 2
        assert_graph_invariants(result)

    @pytest.mark.asyncio
    async def test_edge_references(self) -> None:
        result = await _build(chain_system())

        edge = next(e for e in result.edges if e.key == ("ZCL_A", "ZCL_B"))
        assert edge.references == [MemberReference(member_name="RUN", member_type=MemberType.METHOD)]

    @pytest.mark.asyncio
    async def test_builder_reusable(self) -> None:
        """A DagBuilder keeps no state between builds."""
        system = chain_system()
        builder = DagBuilder(system, system, system)

        first = await builder.build("ZCL_A", "CLAS")
        second = await builder.build("ZCL_B", "CLAS")

        assert _names(first) == {"ZCL_A", "ZCL_B", "ZCL_C"}
        assert _names(second) == {"ZCL_B", "ZCL_C"}

    def test_invalid_budget(self) -> None:
        system = FakeAbapSystem()

        with pytest.raises(ValueError):
            DagBuilder(system, system, system, max_nodes=0)


class TestStandardObjects:
    """Tests for non-custom dependencies."""

    @pytest.mark.asyncio
    async def test_standard_leaf_not_fetched(self) -> None:
        """Standard objects become leaves without a source fetch."""
        system = FakeAbapSystem(
            dependencies={"ZCL_A": [dep("CL_ABAP_TYPEDESCR", "CLAS", "DESCRIBE_BY_DATA")]},
        )

        result = await _build(system)

        leaf = result.node_map["CL_ABAP_TYPEDESCR"]
        assert not leaf.is_custom
        assert not leaf.source_available
        assert leaf.source is None
        assert leaf.used_by == ["ZCL_A"]
        assert system.fetch_calls == ["ZCL_A"]
        assert result.topological_order == ["CL_ABAP_TYPEDESCR", "ZCL_A"]

    @pytest.mark.asyncio
    async def test_standard_dependencies_not_traversed(self) -> None:
        system = FakeAbapSystem(
            dependencies={
                "ZCL_A": [dep("CL_STD", "CLAS")],
                "CL_STD": [dep("CL_DEEPER", "CLAS")],
            },
        )

        result = await _build(system)

        assert _names(result) == {"ZCL_A", "CL_STD"}

    @pytest.mark.asyncio
    async def test_unknown_standard_type_confirmed(self) -> None:
        """A standard dependency of unknown type goes through type resolution."""
        system = FakeAbapSystem(
            dependencies={"ZCL_A": [dep("SFLIGHT"), dep("IF_HTTP_CLIENT"), dep("DATS")]},
            types={"SFLIGHT": ObjectType.TABL, "DATS": ObjectType.UNKNOWN},
        )

        result = await _build(system)

        assert result.node_map["SFLIGHT"].type is ObjectType.TABL
        assert result.node_map["IF_HTTP_CLIENT"].type is ObjectType.INTF
        assert "DATS" not in result.node_map

    @pytest.mark.asyncio
    async def test_irrelevant_standard_type_discarded(self) -> None:
        system = FakeAbapSystem(dependencies={"ZCL_A": [dep("BASIS", "DEVC")]})

        result = await _build(system)

        assert _names(result) == {"ZCL_A"}
        assert result.edges == []
        assert system.resolve_calls == []

    @pytest.mark.asyncio
    async def test_shared_standard_leaf(self) -> None:
        """Two users of one standard object share a single leaf."""
        system = FakeAbapSystem(
            dependencies={
                "ZCL_A": [dep("ZCL_B", "CLAS"), dep("CL_STD", "CLAS")],
                "ZCL_B": [dep("CL_STD", "CLAS")],
            },
        )

        result = await _build(system)

        assert sorted(result.node_map["CL_STD"].used_by) == ["ZCL_A", "ZCL_B"]
        assert_graph_invariants(result)


class TestFiltering:
    """Tests for dependencies that never become nodes or edges."""

    @pytest.mark.asyncio
    async def test_component_references_ignored(self) -> None:
        system = FakeAbapSystem(
            dependencies={"ZCL_A": [dep("ZIF_B~RUN", "INTF"), dep("IF_X~Y", "INTF")]},
        )

        result = await _build(system)

        assert _names(result) == {"ZCL_A"}
        assert result.edges == []
        assert system.fetch_calls == ["ZCL_A"]

    @pytest.mark.asyncio
    async def test_self_references_ignored(self) -> None:
        system = FakeAbapSystem(dependencies={"ZCL_A": [dep("zcl_a", "CLAS")]})

        result = await _build(system)

        assert result.edges == []
        assert_graph_invariants(result)

    @pytest.mark.asyncio
    async def test_irrelevant_custom_type_discarded(self) -> None:
        """Custom dependencies resolving to unmodeled types are dropped."""
        system = FakeAbapSystem(
            dependencies={"ZCL_A": [dep("ZDOMAIN")]},
            types={"ZDOMAIN": ObjectType.UNKNOWN},
        )

        result = await _build(system)

        assert _names(result) == {"ZCL_A"}
        assert result.edges == []
        assert "ZDOMAIN" not in system.fetch_calls

    @pytest.mark.asyncio
    async def test_type_resolved_once_per_object(self) -> None:
        system = FakeAbapSystem(
            dependencies={
                "ZCL_A": [dep("ZCL_B"), dep("ZCL_C")],
                "ZCL_B": [dep("ZCL_DOM")],
                "ZCL_C": [dep("ZCL_DOM")],
            },
            types={"ZCL_B": ObjectType.CLAS, "ZCL_C": ObjectType.CLAS, "ZCL_DOM": ObjectType.UNKNOWN},
        )

        await _build(system)

        assert system.resolve_calls.count("ZCL_DOM") == 1


class TestEdges:
    """Tests for edge accumulation and deferred edges."""

    @pytest.mark.asyncio
    async def test_diamond(self) -> None:
        """A -> B, A -> C, B -> D, C -> D."""
        system = FakeAbapSystem(
            dependencies={
                "ZCL_A": [dep("ZCL_B", "CLAS"), dep("ZCL_C", "CLAS")],
                "ZCL_B": [dep("ZCL_D", "CLAS")],
                "ZCL_C": [dep("ZCL_D", "CLAS")],
            },
        )

        result = await _build(system)

        assert result.node_map["ZCL_D"].used_by == ["ZCL_B", "ZCL_C"]
        order = result.topological_order
        assert order[0] == "ZCL_D"
        assert order[-1] == "ZCL_A"
        assert_graph_invariants(result)

    @pytest.mark.asyncio
    async def test_deferred_edge_to_queued_object(self) -> None:
        """An edge to an object still waiting in the queue survives."""
        system = FakeAbapSystem(
            dependencies={
                "ZCL_A": [dep("ZCL_B", "CLAS"), dep("ZCL_C", "CLAS")],
                "ZCL_B": [dep("ZCL_C", "CLAS")],
            },
        )

        result = await _build(system)

        assert ("ZCL_B", "ZCL_C") in {edge.key for edge in result.edges}
        assert result.node_map["ZCL_C"].used_by == ["ZCL_A", "ZCL_B"]

    @pytest.mark.asyncio
    async def test_duplicate_references_merged(self) -> None:
        """Repeated mentions collapse into one edge with unique members."""
        system = FakeAbapSystem(
            dependencies={
                "ZCL_A": [
                    dep("CL_STD", "CLAS", "GET", "SET"),
                    dep("cl_std", "CLAS", "GET", "RESET"),
                ],
            },
        )

        result = await _build(system)

        assert len(result.edges) == 1
        assert [ref.member_name for ref in result.edges[0].references] == ["GET", "SET", "RESET"]

    @pytest.mark.asyncio
    async def test_cycle(self) -> None:
        """Mutual references keep both edges and still produce an order."""
        system = FakeAbapSystem(
            dependencies={
                "ZCL_A": [dep("ZCL_B", "CLAS")],
                "ZCL_B": [dep("ZCL_A", "CLAS")],
            },
        )

        result = await _build(system)

        assert {edge.key for edge in result.edges} == {("ZCL_A", "ZCL_B"), ("ZCL_B", "ZCL_A")}
        assert sorted(result.topological_order) == ["ZCL_A", "ZCL_B"]
        assert_graph_invariants(result)


class TestPartialFailure:
    """Tests for soft failures."""

    @pytest.mark.asyncio
    async def test_root_fetch_failure_gives_empty_graph(self) -> None:
        """A graph with zero nodes is a valid result, not an exception."""
        system = FakeAbapSystem(fetch_failures={"ZCL_A"})

        result = await _build(system)

        assert result.is_empty
        assert result.edges == []
        assert result.topological_order == []
        assert len(result.errors) == 1
        assert result.errors == ["Failed to fetch source for ZCL_A: not found via search"]

    @pytest.mark.asyncio
    async def test_dependency_fetch_failure_drops_node_and_edge(self) -> None:
        system = chain_system()
        system.fetch_failures.add("ZCL_B")

        result = await _build(system)

        assert _names(result) == {"ZCL_A"}
        assert result.edges == []
        assert result.errors == ["Failed to fetch source for ZCL_B: not found via search"]
        assert_graph_invariants(result)

    @pytest.mark.asyncio
    async def test_extraction_failure_keeps_node(self) -> None:
        system = chain_system()
        system.extract_failures.add("ZCL_B")

        result = await _build(system)

        assert _names(result) == {"ZCL_A", "ZCL_B"}
        assert result.node_map["ZCL_B"].source_available
        assert result.errors == ["Failed to parse dependencies for ZCL_B: syntax error in line 1"]

    @pytest.mark.asyncio
    async def test_resolver_failure_is_soft(self) -> None:
        """Resolver failures fall back to the naming heuristic."""
        system = FakeAbapSystem(
            dependencies={"ZCL_A": [dep("ZIF_B")]},
            resolve_failures={"ZIF_B"},
        )

        result = await _build(system)

        assert result.node_map["ZIF_B"].type is ObjectType.INTF
        assert result.errors == ["Failed to resolve type for ZIF_B: search service unavailable"]


class TestNodeBudget:
    """Tests for the node budget."""

    @staticmethod
    def _long_chain(length: int) -> FakeAbapSystem:
        return FakeAbapSystem(
            dependencies={
                f"ZCL_{i}": [dep(f"ZCL_{i + 1}", "CLAS")] for i in range(length - 1)
            },
        )

    @pytest.mark.asyncio
    async def test_budget_caps_nodes(self) -> None:
        result = await _build(self._long_chain(10), root="ZCL_0", max_nodes=3)

        assert _names(result) == {"ZCL_0", "ZCL_1", "ZCL_2"}
        assert result.errors == ["Node limit of 3 reached: 1 objects left unexplored"]
        assert "ZCL_3" not in {edge.target for edge in result.edges}
        assert_graph_invariants(result)

    @pytest.mark.asyncio
    async def test_no_cutoff_message_when_budget_suffices(self) -> None:
        result = await _build(self._long_chain(3), root="ZCL_0", max_nodes=3)

        assert len(result.nodes) == 3
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_budget_keeps_closest_objects(self) -> None:
        """Breadth-first order: siblings of the root win over grandchildren."""
        system = FakeAbapSystem(
            dependencies={
                "ZCL_A": [dep("ZCL_B", "CLAS"), dep("ZCL_C", "CLAS")],
                "ZCL_B": [dep("ZCL_D", "CLAS")],
            },
        )

        result = await _build(system, max_nodes=3)

        assert _names(result) == {"ZCL_A", "ZCL_B", "ZCL_C"}
        assert "ZCL_D" not in system.fetch_calls
        assert any("Node limit of 3" in error for error in result.errors)

    @pytest.mark.asyncio
    async def test_standard_leaves_respect_budget(self) -> None:
        system = FakeAbapSystem(
            dependencies={"ZCL_A": [dep(f"CL_STD_{i}", "CLAS") for i in range(5)]},
        )

        result = await _build(system, max_nodes=3)

        assert len(result.nodes) == 3
        assert result.errors == ["Node limit of 3 reached: 3 objects left unexplored"]
        assert_graph_invariants(result)

    @pytest.mark.asyncio
    async def test_budget_of_one(self) -> None:
        result = await _build(chain_system(), max_nodes=1)

        assert _names(result) == {"ZCL_A"}
        assert result.edges == []
        assert result.node_map["ZCL_A"].used_by == []
        assert "1 objects left unexplored" in result.errors[0]

    @pytest.mark.asyncio
    async def test_fetch_failure_and_cutoff_messages(self) -> None:
        """A failed fetch does not use up the budget and is reported once."""
        system = FakeAbapSystem(
            dependencies={
                "ZCL_A": [dep("ZCL_B", "CLAS"), dep("ZCL_C", "CLAS"), dep("ZCL_D", "CLAS")],
            },
            fetch_failures={"ZCL_B"},
        )

        result = await _build(system, max_nodes=2)

        assert _names(result) == {"ZCL_A", "ZCL_C"}
        assert result.errors == [
            "Failed to fetch source for ZCL_B: not found via search",
            "Node limit of 2 reached: 1 objects left unexplored",
        ]
        assert_graph_invariants(result)


class TestSerialization:
    """Tests for DagResult.to_dict()."""

    @pytest.mark.asyncio
    async def test_to_dict(self) -> None:
        result = await _build(chain_system())

        data = result.to_dict()

        assert data["root"] == "ZCL_A"
        assert data["topologicalOrder"] == ["ZCL_C", "ZCL_B", "ZCL_A"]
        assert {"from": "ZCL_A", "to": "ZCL_B", "references": [
            {"memberName": "RUN", "memberType": "method"}
        ]} in data["edges"]
        node = next(n for n in data["nodes"] if n["name"] == "ZCL_B")
        assert node == {
            "name": "ZCL_B",
            "type": "CLAS",
            "isCustom": True,
            "sourceAvailable": True,
            "usedBy": ["ZCL_A"],
        }
