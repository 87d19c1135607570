"""Example usage of the domdiff comparison engine."""

import json
from domdiff import (
    ComparisonCollector,
    ComparisonType,
    DiffBuilder,
    DOMDifferenceEngine,
    element_selectors,
    evaluators,
)

# Invoice as produced by the legacy system
old_invoice = """<?xml version="1.0" encoding="UTF-8"?>
<inv:invoice xmlns:inv="urn:example:invoice" id="INV-001">
  <!-- generated by billing v1 -->
  <total currency="EUR">100.00</total>
  <status>paid</status>
  <lineItems>
    <item sku="WIDGET-001" quantity="5"/>
    <item sku="GADGET-002" quantity="2"/>
  </lineItems>
</inv:invoice>
"""

# Same invoice from the new system: other prefix, no pretty printing,
# reordered children and line items
new_invoice = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<i:invoice xmlns:i="urn:example:invoice" id="INV-001">'
    '<!-- generated by billing v1 -->'
    '<status>paid</status>'
    '<total currency="EUR">100.00</total>'
    '<lineItems>'
    '<item sku="GADGET-002" quantity="2"/>'
    '<item sku="WIDGET-001" quantity="5"/>'
    '</lineItems>'
    '</i:invoice>'
)


def main():
    print("=" * 60)
    print("domdiff Comparison Engine - Example")
    print("=" * 60)

    report = (DiffBuilder(old_invoice)
              .with_test(new_invoice)
              .ignore_whitespace()
              .with_element_selector(element_selectors.first_of(
                  element_selectors.by_name_and_attributes("sku"),
                  element_selectors.by_name,
              ))
              .build())

    print(f"\nResult: {report.result.value}")
    print(f"Identical: {report.is_identical}")
    print(f"Similar: {report.is_similar}")
    print(f"\nExecution:")
    print(f"  Duration: {report.execution.duration_ms}ms")
    print(f"  Engine Version: {report.execution.engine_version}")

    print(f"\nSummary:")
    print(f"  Comparisons: {report.summary.comparisons_performed}")
    print(f"  Equal: {report.summary.equal}")
    print(f"  Similar: {report.summary.similar}")
    print(f"  Different: {report.summary.different}")

    if report.differences:
        print(f"\nDifferences:")
        for difference in report.differences:
            print(f"  - {difference.message}")

    print("\n" + "-" * 60)
    print("Full JSON Report:")
    print(json.dumps(report.to_dict(), indent=2))


def example_with_difference():
    """Example that demonstrates a real difference."""
    print("\n" + "=" * 60)
    print("Example with Difference")
    print("=" * 60)

    changed = new_invoice.replace('quantity="5"', 'quantity="6"')

    report = (DiffBuilder(old_invoice)
              .with_test(changed)
              .ignore_whitespace()
              .with_element_selector(element_selectors.by_name_and_attributes("sku"))
              .build())

    print(f"\nResult: {report.result.value}")
    for difference in report.differences:
        print(f"  - {difference.comparison.control_details.xpath}")
        print(f"    {difference.message}")


def example_with_engine():
    """Example driving the engine directly with listeners."""
    print("\n" + "=" * 60)
    print("Example with Engine and Listeners")
    print("=" * 60)

    engine = DOMDifferenceEngine()
    engine.set_difference_evaluator(evaluators.chain(
        evaluators.default,
        evaluators.ignore_whitespace,
        evaluators.downgrade_differences_to_equal(ComparisonType.COMMENT_VALUE),
    ))
    differences = ComparisonCollector()
    engine.add_difference_listener(differences)

    outcome = engine.compare(old_invoice, new_invoice.replace("billing v1", "billing v2"))

    print(f"\nOutcome: {outcome.value} after {engine.comparisons_performed} comparisons")
    for comparison, result in differences.events:
        print(f"  - [{result.value}] {comparison.type.value} at {comparison.control_details.xpath}")


if __name__ == "__main__":
    main()
    example_with_difference()
    example_with_engine()
