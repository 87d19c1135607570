"""Tests for the domdiff comparison engine."""

from xml.dom import Node, minidom
from xml.parsers.expat import ExpatError

import pytest
from domdiff import (
    Comparison,
    ComparisonCollector,
    ComparisonResult,
    ComparisonType,
    DOMDifferenceEngine,
    EngineStateError,
    InvalidArgumentError,
    element_selectors,
    evaluators,
)

EQUAL = ComparisonResult.EQUAL
SIMILAR = ComparisonResult.SIMILAR
DIFFERENT = ComparisonResult.DIFFERENT
CRITICAL = ComparisonResult.CRITICAL

RICH_DOCUMENT = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<!DOCTYPE catalog SYSTEM "catalog.dtd">\n'
    '<?xml-stylesheet href="style.xsl"?>\n'
    '<catalog xmlns="urn:catalog" xmlns:x="urn:extra" version="2">'
    '<!-- first -->'
    '<book id="1" x:lang="en">Title<![CDATA[ <raw> ]]></book>'
    '<x:note>n</x:note>'
    '</catalog>'
)


def root(xml: str):
    return minidom.parseString(xml).documentElement


def signature(collector: ComparisonCollector) -> list:
    return [
        (c.type, c.control_details.xpath, c.test_details.xpath,
         c.control_details.value, c.test_details.value, r)
        for c, r in collector.events
    ]


class TestComparisonDriver:
    """Test the single comparison driver."""

    def setup_method(self):
        self.engine = DOMDifferenceEngine()
        self.collector = ComparisonCollector()
        self.engine.add_comparison_listener(self.collector)

    def _comparison(self, control_value, test_value):
        return Comparison.of(
            ComparisonType.TEXT_VALUE,
            None, "/a[1]/text()[1]", control_value,
            None, "/a[1]/text()[1]", test_value
        )

    def test_equal_values(self):
        """Test that equal values are EQUAL and notified once."""
        result = self.engine.compare_values(self._comparison("x", "x"))
        assert result == EQUAL
        assert len(self.collector) == 1

    def test_both_absent(self):
        """Test that two absent values are EQUAL."""
        assert self.engine.compare_values(self._comparison(None, None)) == EQUAL

    def test_one_absent(self):
        """Test that a value compared to an absent value is DIFFERENT."""
        assert self.engine.compare_values(self._comparison("x", None)) == DIFFERENT
        assert self.engine.compare_values(self._comparison(None, "x")) == DIFFERENT

    def test_value_semantics(self):
        """Test that equality uses values, not identity."""
        control = "".join(["ab", "c"])
        test = "a" + "".join(["b", "c"])
        assert self.engine.compare_values(self._comparison(control, test)) == EQUAL
        assert self.engine.compare_values(self._comparison(2, 2)) == EQUAL

    def test_evaluator_receives_provisional_result(self):
        """Test that the evaluator sees the provisional outcome."""
        seen = []

        def evaluator(comparison, outcome):
            seen.append(outcome)
            return outcome

        self.engine.set_difference_evaluator(evaluator)
        self.engine.compare_values(self._comparison("x", "y"))
        assert seen == [DIFFERENT]

    def test_evaluator_may_escalate_equal(self):
        """Test that an evaluator can turn EQUAL into CRITICAL."""
        self.engine.set_difference_evaluator(lambda c, o: CRITICAL)
        assert self.engine.compare_values(self._comparison("x", "x")) == CRITICAL
        assert self.collector.outcomes == [CRITICAL]

    def test_comparison_is_immutable(self):
        """Test that listeners cannot mutate a comparison."""
        comparison = self._comparison("x", "x")
        with pytest.raises(AttributeError):
            comparison.type = ComparisonType.NODE_TYPE

    def test_evaluator_failure_propagates(self):
        """Test that evaluator exceptions propagate unchanged."""
        def evaluator(comparison, outcome):
            raise RuntimeError("boom")

        self.engine.set_difference_evaluator(evaluator)
        with pytest.raises(RuntimeError, match="boom"):
            self.engine.compare_values(self._comparison("x", "x"))
        assert len(self.collector) == 0


class TestListenerFanOut:
    """Test the three listener channels."""

    def setup_method(self):
        self.engine = DOMDifferenceEngine()
        self.calls = []

    def _listener(self, name):
        def listener(comparison, outcome):
            self.calls.append((name, outcome))
        return listener

    def test_comparison_listeners_before_match_listeners(self):
        """Test notification order for an EQUAL outcome."""
        self.engine.add_match_listener(self._listener("match"))
        self.engine.add_comparison_listener(self._listener("all-1"))
        self.engine.add_comparison_listener(self._listener("all-2"))
        self.engine.add_difference_listener(self._listener("difference"))

        self.engine.compare_nodes(root("<a/>"), root("<a/>"))

        assert self.calls[:3] == [("all-1", EQUAL), ("all-2", EQUAL), ("match", EQUAL)]
        assert all(name != "difference" for name, _ in self.calls)

    def test_difference_listeners_receive_non_equal(self):
        """Test that only non-EQUAL outcomes reach difference listeners."""
        self.engine.add_difference_listener(self._listener("difference"))
        self.engine.set_difference_evaluator(evaluators.chain(
            evaluators.default,
            evaluators.downgrade_differences_to_similar(ComparisonType.ELEMENT_TAG_NAME),
        ))
        self.engine.compare_nodes(root("<a x='1'/>"), root("<b x='2'/>"))
        assert self.calls == [("difference", SIMILAR), ("difference", DIFFERENT)]

    def test_failing_listener_stops_notification(self):
        """Test that a failing listener propagates and later listeners are skipped."""
        def failing(comparison, outcome):
            raise ValueError("listener failed")

        self.engine.add_comparison_listener(failing)
        self.engine.add_comparison_listener(self._listener("after"))
        with pytest.raises(ValueError, match="listener failed"):
            self.engine.compare_nodes(root("<a/>"), root("<a/>"))
        assert self.calls == []

    def test_listener_unanimity(self):
        """Test that comparison listeners see the union of the two channels in order."""
        everything = ComparisonCollector()
        matches = ComparisonCollector()
        differences = ComparisonCollector()
        self.engine.add_comparison_listener(everything)
        self.engine.add_match_listener(matches)
        self.engine.add_difference_listener(differences)

        self.engine.compare_nodes(
            root("<a x='1'><b>t</b><c/></a>"),
            root("<a x='2'><c/><b>u</b><d/></a>")
        )

        assert [e for e in everything.events if e[1] == EQUAL] == matches.events
        assert [e for e in everything.events if e[1] != EQUAL] == differences.events
        assert len(everything) == len(matches) + len(differences)


class TestNodeWalker:
    """Test the per-node comparison sequence (scenarios S1-S6)."""

    def setup_method(self):
        self.engine = DOMDifferenceEngine()
        self.collector = ComparisonCollector()
        self.engine.add_comparison_listener(self.collector)

    def test_identical_empty_elements(self):
        """S1: <a/> vs <a/> emits five EQUAL comparisons and no lookups."""
        result = self.engine.compare_nodes(root("<a/>"), root("<a/>"))

        assert result == EQUAL
        assert self.collector.types == [
            ComparisonType.NODE_TYPE,
            ComparisonType.NAMESPACE_URI,
            ComparisonType.NAMESPACE_PREFIX,
            ComparisonType.ELEMENT_TAG_NAME,
            ComparisonType.CHILD_NODELIST_LENGTH,
        ]
        assert set(self.collector.outcomes) == {EQUAL}

    def test_compare_sources_with_identical_roots(self):
        """Test the full event sequence of compare() on equal documents."""
        result = self.engine.compare("<a/>", "<a/>")

        assert result == EQUAL
        assert self.collector.types == [
            ComparisonType.NODE_TYPE,
            ComparisonType.NAMESPACE_URI,
            ComparisonType.NAMESPACE_PREFIX,
            ComparisonType.XML_VERSION,
            ComparisonType.XML_ENCODING,
            ComparisonType.XML_STANDALONE,
            ComparisonType.CHILD_NODELIST_LENGTH,
            ComparisonType.CHILD_NODELIST_SEQUENCE,
            ComparisonType.NODE_TYPE,
            ComparisonType.NAMESPACE_URI,
            ComparisonType.NAMESPACE_PREFIX,
            ComparisonType.ELEMENT_TAG_NAME,
            ComparisonType.CHILD_NODELIST_LENGTH,
        ]

    def test_compare_sources_with_different_roots(self):
        """Test that compare() reports differently named roots as missing and extra children."""
        result = self.engine.compare("<a/>", "<b/>")

        assert result == DIFFERENT
        assert signature(self.collector) == [
            (ComparisonType.NODE_TYPE, "", "", Node.DOCUMENT_NODE, Node.DOCUMENT_NODE, EQUAL),
            (ComparisonType.NAMESPACE_URI, "", "", None, None, EQUAL),
            (ComparisonType.NAMESPACE_PREFIX, "", "", None, None, EQUAL),
            (ComparisonType.XML_VERSION, "", "", None, None, EQUAL),
            (ComparisonType.XML_ENCODING, "", "", None, None, EQUAL),
            (ComparisonType.XML_STANDALONE, "", "", None, None, EQUAL),
            (ComparisonType.CHILD_NODELIST_LENGTH, "", "", 1, 1, EQUAL),
            (ComparisonType.CHILD_LOOKUP, "/a[1]", "", "a", None, DIFFERENT),
            (ComparisonType.CHILD_LOOKUP, "", "/b[1]", None, "b", DIFFERENT),
        ]
        assert self.collector.of_type(ComparisonType.ELEMENT_TAG_NAME) == []

    def test_different_tag_names(self):
        """S2: a tag name difference does not stop the walk."""
        result = self.engine.compare_nodes(root("<a/>"), root("<b/>"))

        assert result == DIFFERENT
        events = dict(
            (c.type, r) for c, r in self.collector.events
        )
        assert events[ComparisonType.ELEMENT_TAG_NAME] == DIFFERENT
        assert events[ComparisonType.CHILD_NODELIST_LENGTH] == EQUAL
        assert self.collector.types[-1] == ComparisonType.CHILD_NODELIST_LENGTH

    def test_extra_test_child(self):
        """S3: an extra test child is reported once with an absent control side."""
        result = self.engine.compare_nodes(root("<a><b/></a>"), root("<a><b/><c/></a>"))

        assert result == DIFFERENT
        length = self.collector.of_type(ComparisonType.CHILD_NODELIST_LENGTH)
        assert length[0][1] == DIFFERENT
        assert length[0][0].control_details.value == 1
        assert length[0][0].test_details.value == 2

        sequence = self.collector.of_type(ComparisonType.CHILD_NODELIST_SEQUENCE)
        assert len(sequence) == 1
        assert sequence[0][1] == EQUAL

        lookups = self.collector.of_type(ComparisonType.CHILD_LOOKUP)
        assert len(lookups) == 1
        comparison, outcome = lookups[0]
        assert outcome == DIFFERENT
        assert comparison.control_details.value is None
        assert comparison.control_details.node is None
        assert comparison.test_details.value == "c"
        assert comparison.test_details.xpath == "/a[1]/c[1]"
        assert self.collector.types[-1] == ComparisonType.CHILD_LOOKUP

    def test_reordered_children_with_order_insensitive_evaluator(self):
        """S4: reordering downgraded to SIMILAR, subtrees still compared."""
        self.engine.set_difference_evaluator(
            evaluators.downgrade_differences_to_similar(ComparisonType.CHILD_NODELIST_SEQUENCE)
        )
        result = self.engine.compare_nodes(
            root("<a><b/><c/></a>"), root("<a><c/><b/></a>")
        )

        assert result == SIMILAR
        sequence = self.collector.of_type(ComparisonType.CHILD_NODELIST_SEQUENCE)
        assert [r for _, r in sequence] == [SIMILAR, SIMILAR]
        tag_names = self.collector.of_type(ComparisonType.ELEMENT_TAG_NAME)
        assert [c.control_details.value for c, _ in tag_names] == ["a", "b", "c"]
        assert all(r == EQUAL for _, r in tag_names)
        assert self.collector.of_type(ComparisonType.CHILD_LOOKUP) == []

    def test_default_namespace_against_none(self):
        """S5: a default namespace against no namespace is DIFFERENT."""
        self.engine.compare_nodes(root('<a xmlns="u"/>'), root("<a/>"))

        namespace = self.collector.of_type(ComparisonType.NAMESPACE_URI)
        comparison, outcome = namespace[0]
        assert outcome == DIFFERENT
        assert comparison.control_details.value == "u"
        assert comparison.test_details.value is None

    def test_critical_on_first_comparison(self):
        """S6: CRITICAL on NODE_TYPE yields exactly one notification."""
        self.engine.set_difference_evaluator(
            lambda c, o: CRITICAL if c.type == ComparisonType.NODE_TYPE else o
        )
        result = self.engine.compare_nodes(root("<a><b/></a>"), root("<a><b/></a>"))

        assert result == CRITICAL
        assert len(self.collector) == 1

    @pytest.mark.parametrize("k", [1, 3, 5, 6, 9, 12])
    def test_short_circuit_after_k_comparisons(self, k):
        """Test that CRITICAL on the k-th comparison stops after k notifications."""
        calls = []

        def evaluator(comparison, outcome):
            calls.append(comparison)
            return CRITICAL if len(calls) == k else outcome

        self.engine.set_difference_evaluator(evaluator)
        result = self.engine.compare_nodes(
            root("<a x='1'><b>t</b><c/></a>"), root("<a x='1'><b>t</b><c/></a>")
        )

        assert result == CRITICAL
        assert len(self.collector) == k

    def test_fixed_order_per_node(self):
        """Test the fixed comparison order before descending into children."""
        self.engine.compare_nodes(root("<a x='1'><b/></a>"), root("<a x='1'><b/></a>"))

        assert self.collector.types[:8] == [
            ComparisonType.NODE_TYPE,
            ComparisonType.NAMESPACE_URI,
            ComparisonType.NAMESPACE_PREFIX,
            ComparisonType.ELEMENT_TAG_NAME,
            ComparisonType.ATTR_NAME_LOOKUP,
            ComparisonType.ATTR_VALUE,
            ComparisonType.CHILD_NODELIST_LENGTH,
            ComparisonType.CHILD_NODELIST_SEQUENCE,
        ]

    def test_different_node_types_skip_specific_comparisons(self):
        """Test that nodes of different kinds only get the common comparisons."""
        control = root("<a><!--c--></a>").firstChild
        test = root("<a><b/></a>").firstChild
        result = self.engine.compare_nodes(control, test)

        assert result == DIFFERENT
        assert self.collector.types == [
            ComparisonType.NODE_TYPE,
            ComparisonType.NAMESPACE_URI,
            ComparisonType.NAMESPACE_PREFIX,
            ComparisonType.CHILD_NODELIST_LENGTH,
        ]
        assert self.collector.events[0][0].control_details.xpath == "/a[1]/comment()[1]"

    def test_children_of_different_kinds_are_not_paired(self):
        """Test that a comment and an element are reported as missing and extra."""
        control = root("<a><!--c--></a>")
        test = root("<a><b/></a>")
        result = self.engine.compare_nodes(control, test)

        assert result == DIFFERENT
        lookups = self.collector.of_type(ComparisonType.CHILD_LOOKUP)
        assert [c.control_details.value for c, _ in lookups] == ["#comment", None]
        assert [c.test_details.value for c, _ in lookups] == [None, "b"]
        assert self.collector.of_type(ComparisonType.COMMENT_VALUE) == []


class TestNodeTypeSpecificComparisons:
    """Test element, text, comment, PI, doctype and document comparisons."""

    def setup_method(self):
        self.engine = DOMDifferenceEngine()
        self.collector = ComparisonCollector()
        self.engine.add_comparison_listener(self.collector)

    def test_attribute_lookup_and_value(self):
        """Test missing, changed and extra attributes."""
        self.engine.compare_nodes(root('<a x="1" y="2"/>'), root('<a y="3" z="4"/>'))

        attributes = [
            (c.type, c.control_details.value, c.test_details.value, r)
            for c, r in self.collector.events
            if c.type in (ComparisonType.ATTR_NAME_LOOKUP, ComparisonType.ATTR_VALUE)
        ]
        assert attributes == [
            (ComparisonType.ATTR_NAME_LOOKUP, "x", None, DIFFERENT),
            (ComparisonType.ATTR_NAME_LOOKUP, "y", "y", EQUAL),
            (ComparisonType.ATTR_VALUE, "2", "3", DIFFERENT),
            (ComparisonType.ATTR_NAME_LOOKUP, None, "z", DIFFERENT),
        ]

    def test_attribute_xpaths(self):
        """Test that attribute comparisons carry attribute XPaths."""
        self.engine.compare_nodes(root('<a x="1"/>'), root('<a x="2"/>'))

        comparison, _ = self.collector.of_type(ComparisonType.ATTR_VALUE)[0]
        assert comparison.control_details.xpath == "/a[1]/@x"
        assert comparison.test_details.xpath == "/a[1]/@x"

    def test_namespace_declarations_excluded(self):
        """Test that xmlns attributes are not compared as attributes."""
        result = self.engine.compare_nodes(
            root('<a xmlns:p="urn:p"/>'), root('<a xmlns:q="urn:q"/>')
        )
        assert result == EQUAL
        assert self.collector.of_type(ComparisonType.ATTR_NAME_LOOKUP) == []

    def test_namespaced_attributes_match_by_uri(self):
        """Test that attribute prefixes do not matter, only namespace URIs."""
        result = self.engine.compare_nodes(
            root('<a xmlns:p="urn:u" p:x="1"/>'), root('<a xmlns:q="urn:u" q:x="1"/>')
        )
        assert result == EQUAL

    def test_namespace_prefix_is_similar(self):
        """Test that a different prefix for the same namespace is SIMILAR."""
        result = self.engine.compare_nodes(
            root('<p:a xmlns:p="urn:u"/>'), root('<q:a xmlns:q="urn:u"/>')
        )
        assert result == SIMILAR
        comparison, outcome = self.collector.of_type(ComparisonType.NAMESPACE_PREFIX)[0]
        assert (comparison.control_details.value, comparison.test_details.value) == ("p", "q")
        assert outcome == SIMILAR

    def test_text_value(self):
        """Test text value differences."""
        result = self.engine.compare_nodes(root("<a>x</a>"), root("<a>y</a>"))

        assert result == DIFFERENT
        comparison, outcome = self.collector.of_type(ComparisonType.TEXT_VALUE)[0]
        assert outcome == DIFFERENT
        assert comparison.control_details.xpath == "/a[1]/text()[1]"

    def test_adjacent_text_nodes_are_one_fragment(self):
        """Test that adjacent text nodes compare as one concatenated value."""
        control = root("<a>xy</a>")
        test = root("<a/>")
        document = test.ownerDocument
        test.appendChild(document.createTextNode("x"))
        test.appendChild(document.createTextNode("y"))

        result = self.engine.compare_nodes(control, test)

        assert result == EQUAL
        comparison, _ = self.collector.of_type(ComparisonType.TEXT_VALUE)[0]
        assert comparison.test_details.value == "xy"
        length, _ = self.collector.of_type(ComparisonType.CHILD_NODELIST_LENGTH)[0]
        assert length.test_details.value == 1

    def test_text_against_cdata_is_similar(self):
        """Test that text and CDATA with the same data are SIMILAR."""
        control = root("<a>x</a>")
        test = root("<a/>")
        test.appendChild(test.ownerDocument.createCDATASection("x"))

        result = self.engine.compare_nodes(control, test)

        assert result == SIMILAR
        _, outcome = self.collector.of_type(ComparisonType.NODE_TYPE)[1]
        assert outcome == SIMILAR
        _, outcome = self.collector.of_type(ComparisonType.TEXT_VALUE)[0]
        assert outcome == EQUAL

    def test_cdata_value(self):
        """Test that two CDATA sections are compared as CDATA values."""
        control = root("<a/>")
        control.appendChild(control.ownerDocument.createCDATASection("x"))
        test = root("<a/>")
        test.appendChild(test.ownerDocument.createCDATASection("y"))

        assert self.engine.compare_nodes(control, test) == DIFFERENT
        assert len(self.collector.of_type(ComparisonType.CDATA_VALUE)) == 1

    def test_comment_value(self):
        """Test comment comparisons."""
        result = self.engine.compare_nodes(root("<a><!--x--></a>"), root("<a><!--y--></a>"))

        assert result == DIFFERENT
        comparison, outcome = self.collector.of_type(ComparisonType.COMMENT_VALUE)[0]
        assert outcome == DIFFERENT
        assert comparison.control_details.xpath == "/a[1]/comment()[1]"

    def test_processing_instruction(self):
        """Test PI target and data comparisons."""
        result = self.engine.compare_nodes(
            root("<a><?target data?></a>"), root("<a><?target other?></a>")
        )

        assert result == DIFFERENT
        types = [
            (c.type, r) for c, r in self.collector.events
            if c.type in (ComparisonType.PROCESSING_INSTRUCTION_TARGET,
                          ComparisonType.PROCESSING_INSTRUCTION_DATA)
        ]
        assert types == [
            (ComparisonType.PROCESSING_INSTRUCTION_TARGET, EQUAL),
            (ComparisonType.PROCESSING_INSTRUCTION_DATA, DIFFERENT),
        ]

    def test_doctype(self):
        """Test doctype name, public id and system id comparisons."""
        control = minidom.parseString(
            '<!DOCTYPE a PUBLIC "-//A//EN" "a.dtd"><a/>'
        )
        test = minidom.parseString(
            '<!DOCTYPE a PUBLIC "-//B//EN" "b.dtd"><a/>'
        )
        result = self.engine.compare(control, test)

        assert result == DIFFERENT
        outcomes = dict((c.type, r) for c, r in self.collector.events)
        assert outcomes[ComparisonType.DOCTYPE_NAME] == EQUAL
        assert outcomes[ComparisonType.DOCTYPE_PUBLIC_ID] == DIFFERENT
        assert outcomes[ComparisonType.DOCTYPE_SYSTEM_ID] == SIMILAR

    def test_document_declaration(self):
        """Test XML version, encoding and standalone comparisons."""
        control = minidom.parseString("<a/>")
        test = minidom.parseString("<a/>")
        control.version, control.encoding, control.standalone = "1.0", "UTF-8", None
        test.version, test.encoding, test.standalone = "1.0", "ISO-8859-1", True

        result = self.engine.compare(control, test)

        assert result == DIFFERENT
        assert self.collector.types[:7] == [
            ComparisonType.NODE_TYPE,
            ComparisonType.NAMESPACE_URI,
            ComparisonType.NAMESPACE_PREFIX,
            ComparisonType.XML_VERSION,
            ComparisonType.XML_ENCODING,
            ComparisonType.XML_STANDALONE,
            ComparisonType.CHILD_NODELIST_LENGTH,
        ]
        assert self.collector.outcomes[3:6] == [EQUAL, SIMILAR, DIFFERENT]


class TestChildListMatcher:
    """Test pairing of child lists."""

    def setup_method(self):
        self.engine = DOMDifferenceEngine()
        self.collector = ComparisonCollector()
        self.engine.add_comparison_listener(self.collector)

    def test_missing_control_child(self):
        """Test that an unmatched control child has an absent test side."""
        result = self.engine.compare_node_lists(root("<a><b/><c/></a>"), root("<a><b/></a>"))

        assert result == DIFFERENT
        comparison, outcome = self.collector.of_type(ComparisonType.CHILD_LOOKUP)[0]
        assert outcome == DIFFERENT
        assert comparison.control_details.value == "c"
        assert comparison.control_details.xpath == "/a[1]/c[1]"
        assert comparison.test_details.value is None
        assert comparison.test_details.xpath == "/a[1]"

    def test_missing_before_extra(self):
        """Test that unmatched control children are reported before unmatched test children."""
        self.engine.compare_node_lists(root("<a><b/><x/></a>"), root("<a><y/><b/></a>"))

        lookups = [
            (c.control_details.value, c.test_details.value)
            for c, _ in self.collector.of_type(ComparisonType.CHILD_LOOKUP)
        ]
        assert lookups == [("x", None), (None, "y")]

    def test_sequence_values_are_positions(self):
        """Test that CHILD_NODELIST_SEQUENCE compares child positions."""
        self.engine.compare_node_lists(root("<a><x/><b/></a>"), root("<a><b/></a>"))

        comparison, outcome = self.collector.of_type(ComparisonType.CHILD_NODELIST_SEQUENCE)[0]
        assert (comparison.control_details.value, comparison.test_details.value) == (1, 0)
        assert outcome == SIMILAR

    def test_selector_chooses_pairs(self):
        """Test pairing with a custom element selector."""
        self.engine.set_element_selector(element_selectors.by_name_and_attributes("id"))
        result = self.engine.compare_node_lists(
            root('<a><item id="1">one</item><item id="2">two</item></a>'),
            root('<a><item id="2">two</item><item id="1">one</item></a>')
        )

        assert result == SIMILAR
        assert all(
            r == EQUAL for _, r in self.collector.of_type(ComparisonType.TEXT_VALUE)
        )

    def test_default_selector_pairs_by_position_among_same_names(self):
        """Test that the default selector picks the earliest remaining candidate."""
        result = self.engine.compare_node_lists(
            root('<a><item>one</item><item>two</item></a>'),
            root('<a><item>two</item><item>one</item></a>')
        )

        assert result == DIFFERENT
        assert [
            r for _, r in self.collector.of_type(ComparisonType.CHILD_NODELIST_SEQUENCE)
        ] == [EQUAL, EQUAL]

    def test_non_elements_pair_with_same_kind(self):
        """Test that comments and text pair with the next unused node of their kind."""
        result = self.engine.compare_node_lists(
            root("<a>t<!--c--></a>"), root("<a><!--c-->t</a>")
        )

        assert result == SIMILAR
        assert self.collector.of_type(ComparisonType.CHILD_LOOKUP) == []
        assert len(self.collector.of_type(ComparisonType.COMMENT_VALUE)) == 1
        assert len(self.collector.of_type(ComparisonType.TEXT_VALUE)) == 1

    def test_whitespace_text_pairs_only_with_whitespace_text(self):
        """Test that indentation is not paired with text that has content."""
        result = self.engine.compare_node_lists(root("<a> <b/>t</a>"), root("<a><b/>t</a>"))

        assert result == DIFFERENT
        lookups = self.collector.of_type(ComparisonType.CHILD_LOOKUP)
        assert len(lookups) == 1
        assert lookups[0][0].control_details.xpath == "/a[1]/text()[1]"
        assert lookups[0][0].test_details.value is None
        texts = self.collector.of_type(ComparisonType.TEXT_VALUE)
        assert [(c.control_details.value, r) for c, r in texts] == [("t", EQUAL)]

    def test_selector_returning_foreign_node_is_unmatched(self):
        """Test that a selector result outside the candidates counts as no match."""
        stranger = root("<b/>")
        self.engine.set_element_selector(lambda control, candidates: stranger)

        result = self.engine.compare_node_lists(root("<a><b/></a>"), root("<a><b/></a>"))

        assert result == DIFFERENT
        assert len(self.collector.of_type(ComparisonType.CHILD_LOOKUP)) == 2

    def test_nested_xpaths(self):
        """Test XPaths of nested children."""
        self.engine.compare_nodes(
            root("<a><b/><b><c>x</c></b></a>"), root("<a><b/><b><c>y</c></b></a>")
        )
        comparison, _ = self.collector.of_type(ComparisonType.TEXT_VALUE)[0]
        assert comparison.control_details.xpath == "/a[1]/b[2]/c[1]/text()[1]"


class TestEngineConfiguration:
    """Test argument validation and the configurable/running states."""

    def setup_method(self):
        self.engine = DOMDifferenceEngine()

    @pytest.mark.parametrize("method", [
        "add_comparison_listener",
        "add_match_listener",
        "add_difference_listener",
        "set_element_selector",
        "set_difference_evaluator",
    ])
    def test_setters_reject_none(self, method):
        """Test that setters reject None."""
        with pytest.raises(InvalidArgumentError):
            getattr(self.engine, method)(None)

    def test_compare_rejects_none(self):
        """Test that compare rejects absent operands."""
        with pytest.raises(InvalidArgumentError, match="control"):
            self.engine.compare(None, "<a/>")
        with pytest.raises(InvalidArgumentError, match="test"):
            self.engine.compare("<a/>", None)
        assert self.engine.is_running is False

    def test_compare_rejects_unsupported_source(self):
        """Test that unsupported source types are invalid arguments."""
        with pytest.raises(InvalidArgumentError):
            self.engine.compare(42, "<a/>")

    def test_malformed_input_propagates(self):
        """Test that parse errors surface unchanged."""
        with pytest.raises(ExpatError):
            self.engine.compare("<a>", "<a/>")
        assert self.engine.is_running is False

    def test_reentrant_compare_rejected(self):
        """Test that compare cannot be called from a listener."""
        def reenter(comparison, outcome):
            self.engine.compare("<a/>", "<a/>")

        self.engine.add_comparison_listener(reenter)
        with pytest.raises(EngineStateError):
            self.engine.compare("<a/>", "<a/>")
        assert self.engine.is_running is False

    def test_configuration_rejected_while_running(self):
        """Test that the engine is read-only during a run."""
        def reconfigure(comparison, outcome):
            self.engine.set_difference_evaluator(evaluators.accept)

        self.engine.add_comparison_listener(reconfigure)
        with pytest.raises(EngineStateError):
            self.engine.compare("<a/>", "<a/>")

    def test_engine_is_reusable(self):
        """Test that an engine can run several comparisons."""
        collector = ComparisonCollector()
        self.engine.add_comparison_listener(collector)

        assert self.engine.compare("<a/>", "<a/>") == EQUAL
        first = len(collector)
        assert self.engine.comparisons_performed == first
        assert self.engine.compare("<a/>", "<b/>") == DIFFERENT
        assert self.engine.comparisons_performed == len(collector) - first

    def test_defaults(self):
        """Test the default selector and evaluator."""
        assert self.engine.element_selector is element_selectors.default
        assert self.engine.difference_evaluator is evaluators.default


class TestInvariants:
    """Test universal properties of a run."""

    def _run(self, control, test, evaluator=None):
        engine = DOMDifferenceEngine(difference_evaluator=evaluator)
        collector = ComparisonCollector()
        engine.add_comparison_listener(collector)
        engine.compare(control, test)
        return collector

    def test_reflexivity(self):
        """Test that a document compared with itself is all EQUAL."""
        document = minidom.parseString(RICH_DOCUMENT)
        collector = self._run(document, document)

        assert len(collector) > 20
        assert set(collector.outcomes) == {EQUAL}

    def test_reflexivity_on_separate_parses(self):
        """Test that two parses of the same text are all EQUAL."""
        collector = self._run(RICH_DOCUMENT, RICH_DOCUMENT)
        assert set(collector.outcomes) == {EQUAL}
        assert ComparisonType.DOCTYPE_SYSTEM_ID in collector.types
        assert ComparisonType.PROCESSING_INSTRUCTION_DATA in collector.types

    def test_symmetry_of_equality(self):
        """Test that an all-EQUAL comparison stays all-EQUAL when swapped."""
        control = '<a xmlns="urn:a" k="v"><b>t</b><!--c--></a>'
        test = '<a k="v" xmlns="urn:a"><b>t</b><!--c--></a>'

        forward = self._run(control, test)
        backward = self._run(test, control)

        assert set(forward.outcomes) == {EQUAL}
        assert set(backward.outcomes) == {EQUAL}

    def test_determinism(self):
        """Test that two runs produce identical event sequences."""
        control = '<a x="1"><b>t</b><c/><d><e/></d></a>'
        test = '<a x="2"><c/><b>u</b><d/><f/></a>'

        first = signature(self._run(control, test))
        second = signature(self._run(control, test))
        assert first == second

    def test_every_difference_surfaces_once(self):
        """Test that each changed location is reported exactly once."""
        collector = self._run("<a><b>x</b></a>", "<a><b>y</b></a>")
        differences = [c for c, r in collector.events if r != EQUAL]

        assert len(differences) == 1
        assert differences[0].type == ComparisonType.TEXT_VALUE

    def test_node_type_values(self):
        """Test that NODE_TYPE carries DOM node type constants."""
        collector = self._run("<a/>", "<a/>")
        comparison, _ = collector.events[0]
        assert comparison.control_details.value == Node.DOCUMENT_NODE


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
