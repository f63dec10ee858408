import pytest

from algoscope.analysis import analyze_code
from algoscope.analysis.matchers import MATCHERS, Matcher, build_feature_record, evaluate_matchers
from algoscope.analysis.scanner import scan
from algoscope.analysis.stripper import strip_comments_and_strings


def _scan(src):
    return scan(strip_comments_and_strings(src))


class TestCatalog:
    def test_fixed_evaluation_order(self):
        assert [m.name for m in MATCHERS] == [
            "uses_vector",
            "uses_map",
            "uses_2d_array",
            "uses_stack",
            "uses_queue",
            "has_sorting",
            "has_hashing",
            "has_binary_search",
            "has_recursion",
            "has_divide_conquer",
            "has_dfs_bfs",
            "has_dp_memo",
            "has_dp_table",
            "has_early_break",
        ]

    def test_catalog_is_immutable(self):
        assert isinstance(MATCHERS, tuple)

    def test_dependency_on_later_matcher_rejected(self):
        catalog = (Matcher("uses_memo", lambda scan, signals: signals["uses_map"]),)
        with pytest.raises(ValueError, match="uses_map"):
            evaluate_matchers(_scan("x"), catalog)

    def test_duplicate_names_rejected(self):
        catalog = (
            Matcher("flag", lambda scan, signals: True),
            Matcher("flag", lambda scan, signals: False),
        )
        with pytest.raises(ValueError, match="Duplicate"):
            evaluate_matchers(_scan("x"), catalog)

    def test_signals_are_read_only_to_predicates(self):
        def sneaky(scan, signals):
            signals["uses_map"] = True
            return False

        with pytest.raises(TypeError):
            evaluate_matchers(_scan("x"), (Matcher("sneaky", sneaky),))

    def test_record_carries_scan_counts(self):
        record = build_feature_record(_scan("for (;;) { for (;;) { } }"))
        assert record.max_loop_depth == 2
        assert record.num_loop_blocks == 2


class TestDataStructures:
    @pytest.mark.parametrize(
        "src,flag",
        [
            ("std::vector<int> v;", "uses_vector"),
            ("int[] xs = new int[n];", "uses_vector"),
            ("ArrayList<Integer> xs;", "uses_vector"),
            ("unordered_map<int, int> seen;", "uses_map"),
            ("Map<String, Integer> m = new HashMap<>();", "uses_map"),
            ("counts := map[string]int{}", "uses_map"),
            ("seen = dict()", "uses_map"),
            ("int grid[n][m];", "uses_2d_array"),
            ("vector<vector<int>> g;", "uses_2d_array"),
            ("stack<int> st;", "uses_stack"),
            ("Stack<Integer> st = new Stack<>();", "uses_stack"),
            ("queue<int> q;", "uses_queue"),
            ("deque<int> dq;", "uses_queue"),
            ("Queue<Integer> q = new ArrayDeque<>();", "uses_queue"),
        ],
    )
    def test_detected(self, src, flag):
        assert getattr(analyze_code(src), flag) is True

    def test_mentions_inside_comments_ignored(self):
        record = analyze_code("// vector<int> v; map<int,int> m;\nint x;")
        assert not record.uses_vector
        assert not record.uses_map


class TestAlgorithms:
    def test_sorting(self):
        assert analyze_code("std::sort(a.begin(), a.end());").has_sorting
        assert analyze_code("Collections.sort(xs);").has_sorting
        assert analyze_code("xs.sort()").has_sorting

    def test_hashing_implied_by_map(self):
        record = analyze_code("map<int, int> counts;")
        assert record.uses_map and record.has_hashing

    def test_hashing_from_set(self):
        assert analyze_code("unordered_set<int> seen;").has_hashing
        assert analyze_code("Set<Integer> s = new HashSet<>();").has_hashing

    def test_binary_search_needs_both_landmarks(self):
        mid_only = "int mid = lo + (hi - lo) / 2;"
        move_only = "lo = mid + 1;"
        both = mid_only + "\nif (a[mid] < t) lo = mid + 1; else hi = mid - 1;"
        assert not analyze_code(mid_only).has_binary_search
        assert not analyze_code(move_only).has_binary_search
        assert analyze_code(both).has_binary_search

    def test_recursion_requires_a_self_call(self):
        recursive = "int fact(int n) {\n  if (n <= 1) return 1;\n  return n * fact(n - 1);\n}\n"
        plain = "int g(int n) {\n  return h(n);\n}\n"
        assert analyze_code(recursive).has_recursion
        assert not analyze_code(plain).has_recursion

    def test_divide_and_conquer_needs_recursion_and_halving(self):
        halving_loop = "while (n > 1) { n = n / 2; }"
        assert not analyze_code(halving_loop).has_divide_conquer
        src = "void sort_range(int lo, int hi) {\n  int mid = (lo + hi) / 2;\n  sort_range(lo, mid);\n}\n"
        assert not analyze_code(src).has_divide_conquer
        src = "long solve(int n) {\n  return solve(n / 2) + n;\n}\n"
        assert analyze_code(src).has_divide_conquer

    def test_dfs_needs_visited_graph_words_and_traversal_structure(self):
        src = (
            "vector<int> adj[100];\n"
            "bool visited[100];\n"
            "void dfs(int u) {\n"
            "  visited[u] = true;\n"
            "  for (int v : adj[u]) if (!visited[v]) dfs(v);\n"
            "}\n"
        )
        assert analyze_code(src).has_dfs_bfs
        assert not analyze_code("bool visited[100]; int nodes = 3;").has_dfs_bfs
        bfs = "queue<int> q;\nbool visited[64];\nwhile (!q.empty()) { int u = q.front(); for (int v : graph[u]) { } }"
        assert analyze_code(bfs).has_dfs_bfs

    def test_memoization(self):
        src = (
            "map<int, long> memo;\n"
            "long fib(int n) {\n"
            "  if (memo.count(n)) return memo[n];\n"
            "  return memo[n] = fib(n - 1) + fib(n - 2);\n"
            "}\n"
        )
        record = analyze_code(src)
        assert record.has_recursion and record.uses_map and record.has_dp_memo

    def test_tabulation_needs_nested_loops(self):
        flat = "for (int i = 1; i < n; i++) { dp[i] = dp[i - 1] + 1; }"
        nested = "for (i = 1; i < n; i++) { for (j = 1; j < m; j++) { dp[i][j] = dp[i - 1][j]; } }"
        assert not analyze_code(flat).has_dp_table
        assert analyze_code(nested).has_dp_table

    @pytest.mark.parametrize("src", ["for (;;) { break; }", "int f() { return 1; }"])
    def test_any_break_or_return_counts_as_early_exit(self, src):
        assert analyze_code(src).has_early_break
