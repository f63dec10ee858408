import threading

import pytest

from algoscope.config import GraphConfig
from algoscope.graph import (
    GraphRebuilder,
    IncompleteRebuildError,
    RebuildError,
    RebuildInProgressError,
    RebuildTimeoutError,
    SimilarityEdge,
    UserProfile,
    build_similarity_graph,
    build_user_profiles,
    find_shared_patterns,
    get_recommendations,
    persist_graph,
    weighted_jaccard,
)
from algoscope.pipeline import InMemoryStore, PatternFact, StorageUnavailableError


def facts(**profiles):
    out = []
    for user, counts in profiles.items():
        for label, n in counts.items():
            out.extend(PatternFact(user_id=user, pattern=label) for _ in range(n))
    return out


def seed(store, user, *pattern_lists):
    """One submission per pattern list, linked the way the analysis worker links them."""
    for i, patterns in enumerate(pattern_lists):
        sid = store.add_submission(user, "", submission_id=f"{user}-{i}")
        for name in patterns:
            store.link_pattern(sid, store.ensure_pattern(name))


class TestProfiles:
    def test_counts_per_user_sorted_by_id(self):
        profiles = build_user_profiles(facts(zed={"Loop": 2}, amy={"Loop": 1, "Hashing": 3}))
        assert [p.user_id for p in profiles] == ["amy", "zed"]
        assert profiles[0].patterns == {"Loop": 1, "Hashing": 3}
        assert profiles[0].total == 4
        assert profiles[1].labels == frozenset({"Loop"})

    def test_no_facts_no_profiles(self):
        assert build_user_profiles([]) == []


class TestWeightedJaccard:
    def test_partial_overlap(self):
        a = {"A": 2, "B": 1}
        b = {"A": 1, "B": 1, "C": 3}
        assert weighted_jaccard(a, b) == pytest.approx(2 / 6)

    def test_symmetric(self):
        a = {"Loop": 3, "Recursion": 1}
        b = {"Loop": 1, "Sorting": 2}
        assert weighted_jaccard(a, b) == weighted_jaccard(b, a)

    def test_self_similarity(self):
        assert weighted_jaccard({"Loop": 4}, {"Loop": 4}) == 1.0
        assert weighted_jaccard({}, {}) == 0.0

    def test_disjoint(self):
        assert weighted_jaccard({"Loop": 1}, {"Hashing": 1}) == 0.0


class TestSimilarityGraph:
    def test_threshold_is_inclusive(self):
        profiles = [UserProfile("a", {"X": 1}), UserProfile("b", {"X": 1, "Y": 1}), UserProfile("c", {"Z": 1})]
        edges = build_similarity_graph(profiles, threshold=0.5)
        assert edges == [SimilarityEdge("a", "b", 0.5)]

    def test_fewer_than_two_profiles(self):
        assert build_similarity_graph([UserProfile("a", {"X": 1})], threshold=0.0) == []
        assert build_similarity_graph([], threshold=0.0) == []

    def test_each_unordered_pair_once(self):
        profiles = [UserProfile(u, {"X": 1}) for u in "abcd"]
        edges = build_similarity_graph(profiles, threshold=0.1)
        assert len(edges) == 6
        assert len({e.key for e in edges}) == 6

    def test_expired_deadline(self):
        profiles = [UserProfile(u, {"X": 1}) for u in "abc"]
        with pytest.raises(RebuildTimeoutError):
            build_similarity_graph(profiles, threshold=0.1, deadline=0.0)

    def test_edge_key_is_order_independent(self):
        assert SimilarityEdge("b", "a", 0.2).key == SimilarityEdge("a", "b", 0.9).key


class FlakyEdgeStore(InMemoryStore):
    def __init__(self, fail_after):
        super().__init__()
        self.fail_after = fail_after
        self.writes = 0

    def upsert_edge(self, user_a, user_b, similarity):
        if self.writes >= self.fail_after:
            raise StorageUnavailableError("edge table is read-only")
        self.writes += 1
        return super().upsert_edge(user_a, user_b, similarity)


class TestPersist:
    def test_second_run_creates_nothing(self, store):
        edges = [SimilarityEdge("a", "b", 0.4), SimilarityEdge("a", "c", 0.2)]
        first = persist_graph(store, edges)
        second = persist_graph(store, edges)
        assert (first.created, first.updated) == (2, 0)
        assert (second.created, second.updated, second.removed) == (0, 2, 0)
        assert len(store.all_edges()) == 2

    def test_existing_pair_keeps_identity_and_refreshes_score(self, store):
        persist_graph(store, [SimilarityEdge("a", "b", 0.4)])
        before = store.all_edges()[0]
        persist_graph(store, [SimilarityEdge("b", "a", 0.7)])
        after = store.all_edges()
        assert len(after) == 1
        assert after[0].id == before.id
        assert after[0].created_at == before.created_at
        assert after[0].similarity == 0.7

    def test_duplicate_pairs_in_input_written_once(self, store):
        stats = persist_graph(store, [SimilarityEdge("a", "b", 0.4), SimilarityEdge("b", "a", 0.4)])
        assert stats.created == 1
        assert len(store.all_edges()) == 1

    def test_stale_pairs_pruned(self, store):
        persist_graph(store, [SimilarityEdge("a", "b", 0.4), SimilarityEdge("a", "c", 0.2)])
        stats = persist_graph(store, [SimilarityEdge("a", "b", 0.5)])
        assert stats.removed == 1
        assert [(e.user_a, e.user_b) for e in store.all_edges()] == [("a", "b")]

    def test_prune_disabled(self, store):
        persist_graph(store, [SimilarityEdge("a", "c", 0.2)])
        persist_graph(store, [SimilarityEdge("a", "b", 0.5)], prune=False)
        assert len(store.all_edges()) == 2

    def test_failure_reports_partial_progress(self):
        store = FlakyEdgeStore(fail_after=1)
        edges = [SimilarityEdge("a", "b", 0.4), SimilarityEdge("a", "c", 0.2)]
        with pytest.raises(IncompleteRebuildError) as exc_info:
            persist_graph(store, edges)
        assert exc_info.value.persisted == 1
        assert isinstance(exc_info.value.__cause__, StorageUnavailableError)
        assert len(store.all_edges()) == 1


class BrokenFacts:
    def iter_pattern_facts(self):
        raise StorageUnavailableError("facts unavailable")

    def patterns_for_user(self, user_id):
        return []


class TestRebuild:
    def test_rebuild_is_idempotent(self, store, graph_config):
        seed(store, "alice", ["Loop", "Hashing"], ["Loop"])
        seed(store, "bob", ["Loop"])
        seed(store, "carol", ["Recursion"])
        rebuilder = GraphRebuilder(store, store, graph_config)

        first = rebuilder.rebuild()
        edges_after_first = store.all_edges()
        second = rebuilder.rebuild()

        assert first.profiles == 3
        assert first.created == 1
        assert (second.created, second.updated, second.removed) == (0, 1, 0)
        assert store.all_edges() == edges_after_first

    def test_scores_follow_profiles(self, store, graph_config):
        seed(store, "alice", ["Loop", "Hashing"], ["Loop"])
        seed(store, "bob", ["Loop"])
        GraphRebuilder(store, store, graph_config).rebuild()
        (edge,) = store.all_edges()
        assert edge.similarity == pytest.approx(1 / 3)

    def test_single_user_builds_no_edges(self, store, graph_config, caplog):
        seed(store, "alice", ["Loop"])
        with caplog.at_level("INFO"):
            report = GraphRebuilder(store, store, graph_config).rebuild()
        assert report.edges == ()
        assert "at least 2 users" in caplog.text

    def test_threshold_override(self, store, graph_config):
        seed(store, "alice", ["Loop", "Hashing"], ["Loop"])
        seed(store, "bob", ["Loop"])
        report = GraphRebuilder(store, store, graph_config).rebuild(threshold=0.5)
        assert report.edges == ()

    def test_edges_below_threshold_removed_on_rebuild(self, store, graph_config):
        seed(store, "alice", ["Loop"])
        seed(store, "bob", ["Loop"])
        rebuilder = GraphRebuilder(store, store, graph_config)
        rebuilder.rebuild()
        assert len(store.all_edges()) == 1
        seed(store, "bob", ["Loop"], ["Sorting"], ["Hashing"], ["Sorting"], ["Hashing"])
        report = rebuilder.rebuild(threshold=0.25)
        assert report.removed == 1
        assert store.all_edges() == []

    def test_fact_source_failure_aborts(self, store, graph_config):
        with pytest.raises(RebuildError, match="pattern facts"):
            GraphRebuilder(BrokenFacts(), store, graph_config).rebuild()

    def test_persistence_failure_is_incomplete(self, graph_config):
        store = FlakyEdgeStore(fail_after=0)
        seed(store, "alice", ["Loop"])
        seed(store, "bob", ["Loop"])
        with pytest.raises(IncompleteRebuildError):
            GraphRebuilder(store, store, graph_config).rebuild()

    def test_timeout(self, store):
        seed(store, "alice", ["Loop"])
        seed(store, "bob", ["Loop"])
        config = GraphConfig(rebuild_timeout=300.0)
        with pytest.raises(RebuildTimeoutError):
            GraphRebuilder(store, store, config).rebuild(timeout=-1.0)

    def test_concurrent_rebuild_rejected(self, store, graph_config):
        entered = threading.Event()
        release = threading.Event()

        class SlowFacts:
            def iter_pattern_facts(self):
                entered.set()
                release.wait(5)
                return iter(())

            def patterns_for_user(self, user_id):
                return []

        rebuilder = GraphRebuilder(SlowFacts(), store, graph_config)
        worker = threading.Thread(target=rebuilder.rebuild)
        worker.start()
        try:
            assert entered.wait(5)
            assert rebuilder.running
            with pytest.raises(RebuildInProgressError):
                rebuilder.rebuild()
        finally:
            release.set()
            worker.join(5)
        assert not rebuilder.running
        rebuilder.rebuild()


class TestRecommendations:
    def test_shared_patterns_keep_second_list_order(self):
        assert find_shared_patterns(["Loop", "Hashing"], ["Sorting", "Hashing", "Loop"]) == ["Hashing", "Loop"]

    def test_top_edges_enriched(self, store, graph_config):
        seed(store, "alice", ["Loop", "Hashing"])
        seed(store, "bob", ["Loop", "Hashing"])
        seed(store, "carol", ["Loop", "Recursion"])
        seed(store, "dave", ["Sorting"])
        GraphRebuilder(store, store, graph_config).rebuild()

        recs = get_recommendations(store, store, "alice", limit=5)
        assert [(r.user_a, r.user_b) for r in recs] == [("alice", "bob"), ("alice", "carol")]
        assert recs[0].similarity == 1.0
        assert recs[1].similarity == pytest.approx(1 / 3)
        assert set(recs[0].shared_patterns) == {"Loop", "Hashing"}
        assert recs[1].shared_patterns == ("Loop",)
        assert recs[1].total_patterns == 1
        assert recs[1].user_b_patterns == ("Loop", "Recursion")

    def test_limit_and_other_side(self, store, graph_config):
        seed(store, "alice", ["Loop"])
        seed(store, "bob", ["Loop"])
        seed(store, "carol", ["Loop"])
        GraphRebuilder(store, store, graph_config).rebuild()

        recs = get_recommendations(store, store, "carol", limit=1)
        assert len(recs) == 1
        assert recs[0].user_b == "carol"
        assert recs[0].user_a == "alice"

    def test_unknown_user(self, store):
        assert get_recommendations(store, store, "nobody") == []

    def test_to_dict(self, store, graph_config):
        seed(store, "alice", ["Loop"])
        seed(store, "bob", ["Loop"])
        GraphRebuilder(store, store, graph_config).rebuild()
        data = get_recommendations(store, store, "bob")[0].to_dict()
        assert data["shared_patterns"] == ["Loop"]
        assert data["total_patterns"] == 1
        assert len(data["created_at"]) == len("2024-01-01")
