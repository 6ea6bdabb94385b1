"""Tests for the analysis module.

This module contains tests for:
- Complexity metrics calculation
- Dependency graph construction
- Pattern detection
- Best-practice checks
- Data flow, control flow and semantic analysis
"""

import math

import pytest

from core.analysis.dataflow import ControlFlowType, DataFlowOperationType
from core.analysis.dependencies import (
    DependencyEdge,
    DependencyGraph,
    DependencyType,
    EdgeType,
)
from core.analysis.metrics import ComplexityMetrics
from core.analysis.models import AnalysisConfig, AnalysisSeverity
from core.analysis.patterns import PatternCategory, PatternDefinition, PatternDetector
from core.analysis.practices import BestPracticeChecker
from core.parser.models import (
    ClassInfo,
    CodeStructure,
    FunctionInfo,
    ImportInfo,
    SourceSpan,
    VariableInfo,
    VariableScope,
)


def function(name: str, start: int = 1, end: int = 1, **kwargs) -> FunctionInfo:
    """Build a FunctionInfo spanning the given lines."""
    return FunctionInfo(name=name, span=SourceSpan(start=start, end=end), **kwargs)


# =============================================================================
# Analysis Models Tests
# =============================================================================


class TestAnalysisConfig:
    """Tests for AnalysisConfig model."""

    def test_default_config(self):
        """Test default thresholds."""
        config = AnalysisConfig()
        assert config.min_name_length == 3
        assert config.max_function_lines == 50
        assert config.max_parameters == 5
        assert config.min_comment_ratio == 0.3
        assert config.min_functions_for_comment_check == 5
        assert config.short_name_allowlist == frozenset({"go", "run"})

    def test_custom_config(self):
        """Test overriding thresholds."""
        config = AnalysisConfig(max_function_lines=20, max_parameters=3)
        assert config.max_function_lines == 20
        assert config.max_parameters == 3


# =============================================================================
# Complexity Metrics Tests
# =============================================================================


class TestComplexityMetrics:
    """Tests for ComplexityMetrics model."""

    def test_default_metrics(self):
        """Test default metric values are the identity values."""
        metrics = ComplexityMetrics()
        assert metrics.cyclomatic == 1
        assert metrics.cognitive == 0
        assert metrics.maintainability_index == 100
        assert metrics.halstead.volume == 0.0


class TestComplexityAnalyzer:
    """Tests for ComplexityAnalyzer."""

    def test_simple_function(self, complexity_analyzer, simple_function_code):
        """A function without branches has cyclomatic 1 and cognitive 0."""
        metrics = complexity_analyzer.analyze(simple_function_code)
        assert metrics.cyclomatic == 1
        assert metrics.cognitive == 0

    def test_empty_source(self, complexity_analyzer):
        """Empty source yields identity metrics without errors."""
        metrics = complexity_analyzer.analyze("")

        assert metrics.cyclomatic == 1
        assert metrics.cognitive == 0
        assert metrics.halstead.volume == 0.0
        assert metrics.halstead.difficulty == 0.0
        assert metrics.lines_of_code.total == 1
        assert metrics.lines_of_code.blank == 1
        assert 0 <= metrics.maintainability_index <= 100

    def test_cyclomatic_branches(self, complexity_analyzer):
        """else-if counts twice, logical operators once each."""
        source = "if (a && b) { x() } else if (c) { y() }"
        # if( x2, else if( x1, && x1
        assert complexity_analyzer.calculate_cyclomatic_complexity(source) == 5

    def test_cyclomatic_switch_and_catch(self, complexity_analyzer):
        """Each case and catch adds a path."""
        source = """switch (x) {
  case 1: break;
  case 2: break;
}
try { run() } catch (e) { log(e) }
"""
        assert complexity_analyzer.calculate_cyclomatic_complexity(source) == 4

    def test_cognitive_nesting(self, complexity_analyzer, nested_if_code):
        """Nested conditions cost more than flat ones."""
        metrics = complexity_analyzer.analyze(nested_if_code)
        # 1 + 2 + 3
        assert metrics.cognitive == 6
        assert metrics.cyclomatic == 4
        assert metrics.cognitive > metrics.cyclomatic

    def test_cognitive_loops(self, complexity_analyzer):
        """Loops nest like conditions."""
        source = """for (const item of items) {
  while (item.busy) {
    wait();
  }
}
"""
        assert complexity_analyzer.calculate_cognitive_complexity(source) == 3

    def test_cognitive_ignores_identifiers(self, complexity_analyzer):
        """Keywords embedded in identifiers are not control flow."""
        assert complexity_analyzer.calculate_cognitive_complexity("const forEachItem = 1;") == 0

    def test_halstead_metrics(self, complexity_analyzer):
        """Halstead counts follow the operator and operand tokens."""
        halstead = complexity_analyzer.calculate_halstead_metrics("a = b + c")

        assert halstead.operators == 2
        assert halstead.operands == 3
        assert halstead.distinct_operators == 2
        assert halstead.distinct_operands == 3
        assert halstead.vocabulary == 5
        assert halstead.length == 5
        assert halstead.volume == pytest.approx(5 * math.log2(5))
        assert halstead.difficulty == pytest.approx(1.0)
        assert halstead.effort == pytest.approx(halstead.volume)

    def test_halstead_identities(self, complexity_analyzer, class_code):
        """Vocabulary, length and volume are consistent."""
        h = complexity_analyzer.calculate_halstead_metrics(class_code)

        assert h.vocabulary == h.distinct_operators + h.distinct_operands
        assert h.length == h.operators + h.operands
        assert h.volume == pytest.approx(h.length * math.log2(h.vocabulary))
        assert h.time == pytest.approx(h.effort / 18)
        assert h.bugs == pytest.approx(h.volume / 3000)

    def test_lines_of_code(self, complexity_analyzer):
        """Comment, blank and source lines add up to the total."""
        source = "// header\n/* block\n   comment */\n\ncode();\n"
        loc = complexity_analyzer.calculate_lines_of_code(source)

        assert loc.total == 6
        assert loc.comments == 3
        assert loc.blank == 2
        assert loc.source == 1
        assert loc.total == loc.source + loc.comments + loc.blank

    def test_maintainability_bounds(self, complexity_analyzer):
        """The maintainability index is clamped to [0, 100]."""
        assert complexity_analyzer.calculate_maintainability_index(0.0, 1, 0) == 100
        assert complexity_analyzer.calculate_maintainability_index(1e30, 500, 100000) == 0

    def test_maintainability_in_range(self, complexity_analyzer, nested_if_code, class_code):
        """Real code scores within range."""
        for source in (nested_if_code, class_code):
            mi = complexity_analyzer.analyze(source).maintainability_index
            assert 0 <= mi <= 100

    def test_identity_metrics(self, complexity_analyzer):
        """Identity metrics only compute line counts."""
        metrics = complexity_analyzer.identity("print('hi')\nif x:\n    pass\n")

        assert metrics.cyclomatic == 1
        assert metrics.cognitive == 0
        assert metrics.halstead.operators == 0
        assert metrics.lines_of_code.source == 3

    def test_analyze_function(self, complexity_analyzer, nested_if_code):
        """Function metrics cover only the function's lines."""
        source = "if (x) { y() }\n" + nested_if_code
        func = function("classify", start=2, end=11)
        metrics = complexity_analyzer.analyze_function(source, func)
        assert metrics.cyclomatic == 4


# =============================================================================
# Dependency Graph Tests
# =============================================================================


class TestDependencyGraphBuilder:
    """Tests for DependencyGraphBuilder."""

    def test_classification(self, dependency_builder):
        """Relative paths are internal, core modules builtin, others external."""
        assert dependency_builder.classify("./utils") == DependencyType.INTERNAL
        assert dependency_builder.classify("../lib/api") == DependencyType.INTERNAL
        assert dependency_builder.classify("fs") == DependencyType.BUILTIN
        assert dependency_builder.classify("node:path") == DependencyType.BUILTIN
        assert dependency_builder.classify("react") == DependencyType.EXTERNAL
        assert dependency_builder.classify("@scope/pkg") == DependencyType.EXTERNAL

    def test_build_single_unit(self, dependency_builder):
        """Every import becomes an edge from the root node."""
        imports = [
            ImportInfo(source="react"),
            ImportInfo(source="./utils"),
            ImportInfo(source="fs", is_require=True),
            ImportInfo(source="./lazy", is_dynamic=True),
        ]
        graph = dependency_builder.build(imports)

        assert [n.id for n in graph.nodes] == ["main", "react", "./utils", "fs", "./lazy"]
        assert graph.get_node("main").type == DependencyType.INTERNAL
        assert [e.type for e in graph.edges] == [
            EdgeType.IMPORT,
            EdgeType.IMPORT,
            EdgeType.REQUIRE,
            EdgeType.DYNAMIC,
        ]
        assert all(e.source == "main" for e in graph.edges)
        assert graph.depth == 1
        assert graph.cycles == []

    def test_edge_endpoints_are_nodes(self, dependency_builder):
        """Every edge connects nodes present in the graph."""
        graph = dependency_builder.build([ImportInfo(source="a"), ImportInfo(source="./b")])
        ids = {n.id for n in graph.nodes}
        for edge in graph.edges:
            assert edge.source in ids
            assert edge.target in ids

    def test_no_imports(self, dependency_builder):
        """A unit without imports has only the root and depth 0."""
        graph = dependency_builder.build([])
        assert [n.id for n in graph.nodes] == ["main"]
        assert graph.edges == []
        assert graph.depth == 0

    def test_duplicate_imports_share_node(self, dependency_builder):
        """Importing a module twice adds two edges but one node."""
        graph = dependency_builder.build([ImportInfo(source="react"), ImportInfo(source="react")])
        assert len(graph.nodes) == 2
        assert len(graph.edges) == 2

    def test_mutual_import_cycle(self, dependency_builder):
        """Two modules importing each other form exactly one cycle pair."""
        graph = dependency_builder.build_project(
            {
                "./a": [ImportInfo(source="./b")],
                "./b": [ImportInfo(source="./a")],
            }
        )
        assert graph.cycles == [("./a", "./b")]

    def test_longer_cycle_not_detected(self, dependency_builder):
        """Only direct mutual references are reported."""
        graph = dependency_builder.build_project(
            {
                "./a": [ImportInfo(source="./b")],
                "./b": [ImportInfo(source="./c")],
                "./c": [ImportInfo(source="./a")],
            }
        )
        assert graph.cycles == []
        assert graph.depth == 2

    def test_depth_from_root(self, dependency_builder):
        """Depth is the longest chain reached from the roots."""
        graph = dependency_builder.build_project(
            {
                "main": [ImportInfo(source="./a")],
                "./a": [ImportInfo(source="./b")],
                "./b": [ImportInfo(source="lodash")],
            },
            roots=["main"],
        )
        assert graph.depth == 3
        assert [e.target for e in graph.get_outgoing_edges("./a")] == ["./b"]

    def test_edge_serialization_aliases(self):
        """Edges serialize with from/to keys."""
        edge = DependencyEdge(source="main", target="react")
        assert edge.model_dump(by_alias=True) == {"from": "main", "to": "react", "type": "import"}
        assert DependencyEdge.model_validate({"from": "a", "to": "b"}).target == "b"

    def test_graph_json_round_trip(self, dependency_builder):
        """Cycle pairs serialize as two-element arrays."""
        graph = dependency_builder.build_project(
            {"./a": [ImportInfo(source="./b")], "./b": [ImportInfo(source="./a")]}
        )
        restored = DependencyGraph.model_validate_json(graph.model_dump_json())
        assert restored == graph


# =============================================================================
# Pattern Detection Tests
# =============================================================================


class TestPatternDetector:
    """Tests for PatternDetector."""

    def test_singleton(self, pattern_detector, singleton_code):
        """A static instance accessor is a Singleton."""
        patterns = pattern_detector.detect_patterns(singleton_code, CodeStructure())

        singleton = next(p for p in patterns if p.name == "Singleton")
        assert singleton.confidence == 0.85
        assert singleton.category == PatternCategory.DESIGN
        assert singleton.span.start == 2

    def test_factory(self, pattern_detector):
        """Functions named create*/factory are Factories."""
        structure = CodeStructure(functions=[function("createUser", start=3, end=5)])
        patterns = pattern_detector.detect_patterns("", structure)

        assert [p.name for p in patterns] == ["Factory"]
        assert patterns[0].confidence == 0.80
        assert patterns[0].span == SourceSpan(start=3, end=5)

    def test_factory_method(self, pattern_detector):
        """Class methods count for the Factory signature."""
        structure = CodeStructure(
            classes=[ClassInfo(name="Widgets", methods=[function("widgetFactory")])]
        )
        assert [p.name for p in pattern_detector.detect_patterns("", structure)] == ["Factory"]

    def test_observer_requires_both_groups(self, pattern_detector):
        """Observer needs a subscription and a notification marker."""
        full = "bus.subscribe(handler);\nbus.emit('ready');"
        half = "bus.subscribe(handler);"

        assert "Observer" in [p.name for p in pattern_detector.detect_patterns(full, CodeStructure())]
        assert pattern_detector.detect_patterns(half, CodeStructure()) == []

    def test_react_hooks(self, pattern_detector, react_component_code):
        """useState with useEffect is the React Hooks idiom."""
        patterns = pattern_detector.detect_patterns(react_component_code, CodeStructure())

        hooks = next(p for p in patterns if p.name == "React Hooks")
        assert hooks.confidence == 0.95
        assert hooks.category == PatternCategory.IDIOM

    def test_react_hooks_needs_both(self, pattern_detector):
        """useState alone is not enough."""
        source = "const [a, setA] = useState(0);"
        assert pattern_detector.detect_patterns(source, CodeStructure()) == []

    def test_no_patterns(self, pattern_detector, simple_function_code):
        """Plain code matches nothing."""
        assert pattern_detector.detect_patterns(simple_function_code, CodeStructure()) == []

    def test_custom_patterns(self):
        """Custom signatures replace the defaults."""
        detector = PatternDetector(
            [
                PatternDefinition(
                    id="memo",
                    name="Memoization",
                    category=PatternCategory.IDIOM,
                    confidence=0.6,
                    any_of=["memoize"],
                )
            ]
        )
        patterns = detector.detect_patterns("x\nconst fast = memoize(slow);", CodeStructure())
        assert [p.name for p in patterns] == ["Memoization"]
        assert patterns[0].span.start == 2


# =============================================================================
# Best Practice Tests
# =============================================================================


class TestBestPracticeChecker:
    """Tests for BestPracticeChecker."""

    def test_clean_code(self, practice_checker):
        """Well-formed functions produce no findings."""
        structure = CodeStructure(functions=[function("add", params=["a", "b"])])
        assert practice_checker.check("function add(a, b) { return a + b }", structure) == []

    def test_short_name(self, practice_checker):
        """Short names are flagged unless allowlisted."""
        structure = CodeStructure(functions=[function("fn"), function("go"), function("run")])
        checks = practice_checker.check("", structure)

        assert len(checks) == 1
        assert checks[0].rule == "naming-convention"
        assert checks[0].severity == AnalysisSeverity.WARNING
        assert checks[0].passed is False

    @pytest.mark.parametrize(
        ("end", "flagged"),
        [(52, True), (51, False), (50, False)],
    )
    def test_function_length(self, practice_checker, end, flagged):
        """Functions spanning more than 50 lines are flagged."""
        structure = CodeStructure(functions=[function("process", start=1, end=end)])
        rules = [c.rule for c in practice_checker.check("", structure)]
        assert ("function-length" in rules) is flagged

    def test_parameter_count(self, practice_checker):
        """More than five parameters are flagged."""
        many = function("build", params=["a", "b", "c", "d", "e", "f"])
        five = function("make", params=["a", "b", "c", "d", "e"])
        checks = practice_checker.check("", CodeStructure(functions=[many, five]))

        assert [(c.rule, c.line) for c in checks] == [("parameter-count", 1)]

    def test_async_without_error_handling(self, practice_checker):
        """Async functions without try/catch are errors."""
        source = "async function loadData() {\n  await api.get();\n}"
        structure = CodeStructure(functions=[function("loadData", 1, 3, is_async=True)])
        checks = practice_checker.check(source, structure)

        assert len(checks) == 1
        assert checks[0].rule == "error-handling"
        assert checks[0].severity == AnalysisSeverity.ERROR

    def test_async_with_error_handling(self, practice_checker):
        """A try block inside the function satisfies the rule."""
        source = "async function loadData() {\n  try { await api.get() } catch (e) {}\n}"
        structure = CodeStructure(functions=[function("loadData", 1, 3, is_async=True)])
        assert practice_checker.check(source, structure) == []

    def test_error_handling_scoped_to_function(self, practice_checker):
        """A try elsewhere in the file does not cover the function."""
        source = "async function loadData() {\n  await api.get();\n}\ntry { x() } catch (e) {}"
        structure = CodeStructure(functions=[function("loadData", 1, 3, is_async=True)])
        assert [c.rule for c in practice_checker.check(source, structure)] == ["error-handling"]

    def test_low_comment_coverage(self, practice_checker):
        """More than five uncommented functions trigger an info finding."""
        names = [f"task{i}" for i in range(6)]
        source = "\n".join(f"function {name}() {{}}" for name in names)
        structure = CodeStructure(
            functions=[function(name, i + 1, i + 1) for i, name in enumerate(names)]
        )
        checks = practice_checker.check(source, structure)

        assert [c.rule for c in checks] == ["comment-coverage"]
        assert checks[0].severity == AnalysisSeverity.INFO

    def test_sufficient_comment_coverage(self, practice_checker):
        """Two of six commented functions meet the 0.3 ratio."""
        lines: list[str] = []
        functions: list[FunctionInfo] = []
        for i in range(6):
            if i < 2:
                lines.append(f"// task {i}")
            lines.append(f"function task{i}() {{}}")
            functions.append(function(f"task{i}", len(lines), len(lines)))

        checks = practice_checker.check("\n".join(lines), CodeStructure(functions=functions))
        assert checks == []

    def test_comment_check_needs_enough_functions(self, practice_checker):
        """Five functions are too few for the coverage rule."""
        structure = CodeStructure(functions=[function(f"task{i}", i + 1, i + 1) for i in range(5)])
        assert practice_checker.check("", structure) == []

    def test_methods_are_checked(self, practice_checker):
        """Class methods are subject to the same rules."""
        structure = CodeStructure(classes=[ClassInfo(name="Api", methods=[function("x")])])
        assert [c.rule for c in practice_checker.check("", structure)] == ["naming-convention"]

    def test_custom_thresholds(self):
        """Thresholds come from the config."""
        checker = BestPracticeChecker(AnalysisConfig(max_parameters=1))
        structure = CodeStructure(functions=[function("pair", params=["a", "b"])])
        assert [c.rule for c in checker.check("", structure)] == ["parameter-count"]


# =============================================================================
# Data Flow Tests
# =============================================================================


class TestDataFlowAnalyzer:
    """Tests for DataFlowAnalyzer."""

    def test_variable_operations(self, dataflow_analyzer):
        """Each line records the strongest access of the variable."""
        source = """let count = 0;
count += 1;
count++;
console.log(count);
count = 5;
if (count === 5) {}
const recount = 2;
"""
        structure = CodeStructure(
            variables=[VariableInfo(name="count", kind="let", scope=VariableScope.GLOBAL)]
        )
        nodes = dataflow_analyzer.analyze_data_flow(source, structure)

        assert len(nodes) == 1
        node = nodes[0]
        assert node.variable == "count"
        assert node.scope == VariableScope.GLOBAL
        assert [(op.type, op.line) for op in node.operations] == [
            (DataFlowOperationType.WRITE, 1),
            (DataFlowOperationType.MODIFY, 2),
            (DataFlowOperationType.MODIFY, 3),
            (DataFlowOperationType.READ, 4),
            (DataFlowOperationType.WRITE, 5),
            (DataFlowOperationType.READ, 6),
        ]
        assert [op.line for op in node.get_writes()] == [1, 5]
        assert [op.line for op in node.get_reads()] == [4, 6]

    def test_no_variables(self, dataflow_analyzer):
        """Without tracked variables there is no data flow."""
        assert dataflow_analyzer.analyze_data_flow("x = 1", CodeStructure()) == []

    def test_control_flow(self, dataflow_analyzer):
        """Conditions, loops and switches are listed in line order."""
        source = """if (a > 1) { x(); } else { y(); }
for (let i = 0; i < n; i++) {}
while (busy) {}
switch (mode) {
  case 'a':
    break;
  case 'b':
    break;
  default:
    break;
}
"""
        nodes = dataflow_analyzer.analyze_control_flow(source)

        assert [n.type for n in nodes] == [
            ControlFlowType.IF,
            ControlFlowType.LOOP,
            ControlFlowType.LOOP,
            ControlFlowType.SWITCH,
        ]
        assert nodes[0].condition == "a > 1"
        assert nodes[0].branches == 2
        assert nodes[1].branches == 1
        assert nodes[3].branches == 2
        assert nodes[3].span == SourceSpan(start=4, end=11)

    def test_if_without_else(self, dataflow_analyzer):
        """An if without else on its line has one branch."""
        nodes = dataflow_analyzer.analyze_control_flow("if (ready(x)) {\n  go();\n}")
        assert nodes[0].condition == "ready(x)"
        assert nodes[0].branches == 1


# =============================================================================
# Semantic Analysis Tests
# =============================================================================


class TestSemanticAnalyzer:
    """Tests for SemanticAnalyzer."""

    @pytest.mark.parametrize(
        ("source", "intent"),
        [
            ("const data = await fetch('/api');", "data-fetching"),
            ("axios.get('/api')", "data-fetching"),
            ("const [a, setA] = useState(0);", "ui-component"),
            ("app.listen(3000);", "api-server"),
            ("const x = 1;", "general-purpose"),
        ],
    )
    def test_intent(self, semantic_analyzer, source, intent):
        """Intent is inferred from keyword families."""
        assert semantic_analyzer.infer_intent(source, CodeStructure()) == intent

    def test_intent_precedence(self, semantic_analyzer):
        """Data fetching wins over UI markers."""
        source = "useEffect(() => { fetch('/x') }, []);"
        assert semantic_analyzer.infer_intent(source, CodeStructure()) == "data-fetching"

    def test_testing_intent(self, semantic_analyzer):
        """Functions named after tests mark a test unit."""
        structure = CodeStructure(functions=[function("testLogin")])
        assert semantic_analyzer.infer_intent("", structure) == "testing"

    @pytest.mark.parametrize(
        ("source", "domain"),
        [
            ("class App extends React.Component {}", "frontend"),
            ("const app = express();", "backend"),
            ("connect('mongodb://localhost')", "database"),
            ("import * as tf from 'tensorflow';", "machine-learning"),
            ("const ml = train(data);", "machine-learning"),
            ("const page = html`<div></div>`;", "general"),
        ],
    )
    def test_domain(self, semantic_analyzer, source, domain):
        """Domain is inferred from technology markers."""
        assert semantic_analyzer.infer_domain(source) == domain

    def test_concepts(self, semantic_analyzer):
        """Concepts are camel-case words longer than two characters."""
        structure = CodeStructure(
            functions=[function("getUserData"), function("anonymous"), function("toId")],
            classes=[ClassInfo(name="UserService")],
        )
        assert semantic_analyzer.extract_concepts(structure) == ["get", "user", "data", "service"]

    def test_analyze(self, semantic_analyzer, react_component_code):
        """The full summary combines every listing."""
        structure = CodeStructure(functions=[function("UserProfile", 3, 11)])
        analysis = semantic_analyzer.analyze(react_component_code, structure)

        assert analysis.intent == "data-fetching"
        assert analysis.domain == "frontend"
        assert analysis.concepts == ["user", "profile"]
        assert analysis.data_flow == []
        assert analysis.control_flow == []
