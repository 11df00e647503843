from kbindex.catalog.graph import ProjectGraph, resolve_closure
from kbindex.models import ProjectMetadata


def _graph(**deps: list[str]):
    table = {pid: ProjectMetadata(display_name=pid, dependencies=tuple(d)) for pid, d in deps.items()}
    return table.get


def test_nested_dependency_is_promoted_before_its_dependent() -> None:
    lookup = _graph(P=["A", "B"], A=["B"], B=[])

    assert resolve_closure("P", lookup) == ["B", "A"]


def test_two_node_cycle_is_cut_symmetrically() -> None:
    lookup = _graph(X=["Y"], Y=["X"])

    assert resolve_closure("X", lookup) == ["Y"]
    assert resolve_closure("Y", lookup) == ["X"]


def test_longer_cycle_terminates_without_duplicates() -> None:
    lookup = _graph(A=["B"], B=["C"], C=["D"], D=["A", "B"])

    closure = resolve_closure("A", lookup)
    assert closure == ["B", "D", "C"]
    assert len(closure) == len(set(closure))
    assert "A" not in closure


def test_self_dependency_is_ignored() -> None:
    lookup = _graph(A=["A", "B"], B=[])

    assert resolve_closure("A", lookup) == ["B"]


def test_shared_dependency_keeps_first_discovery_position() -> None:
    lookup = _graph(P=["A", "C", "B"], A=["B"], C=["D"], D=["B", "E"], B=[], E=[])

    assert resolve_closure("P", lookup) == ["B", "A", "E", "D", "C"]


def test_missing_metadata_yields_empty_closure() -> None:
    lookup = _graph(P=["Ghost"])

    assert resolve_closure("Nobody", lookup) == []
    # A dependency without metadata is still part of the closure
    assert resolve_closure("P", lookup) == ["Ghost"]


def test_each_top_level_call_starts_fresh() -> None:
    lookup = _graph(P=["A"], A=["B"], B=[])

    assert resolve_closure("P", lookup) == resolve_closure("P", lookup) == ["B", "A"]


def test_find_cycles_reports_sccs_and_self_loops() -> None:
    lookup = _graph(X=["Y"], Y=["X"], S=["S"], P=["A"], A=[])

    graph = ProjectGraph.from_lookup(["X", "S", "P"], lookup)

    assert graph.find_cycles() == [["S"], ["X", "Y"]]
    assert graph.get_dependents("A") == {"P"}


def test_find_cycles_follows_undeclared_projects() -> None:
    lookup = _graph(P=["Q"], Q=["R"], R=["Q"])

    graph = ProjectGraph.from_lookup(["P"], lookup)

    assert graph.find_cycles() == [["Q", "R"]]


def test_cycle_reached_through_third_project_keeps_discovery_order() -> None:
    lookup = _graph(W=["X"], X=["Y"], Y=["X"])

    # Y re-enters X, which is still placed before Y, so Y has the higher priority
    assert resolve_closure("W", lookup) == ["X", "Y"]
    assert resolve_closure("X", lookup) == ["Y"]


def test_find_cycles_handles_long_chains() -> None:
    chain = {f"P{i}": [f"P{i + 1}"] for i in range(2000)}
    chain["P2000"] = ["P0"]
    lookup = _graph(**chain)

    cycles = ProjectGraph.from_lookup(["P0"], lookup).find_cycles()

    assert len(cycles) == 1 and len(cycles[0]) == 2001
