#!/usr/bin/env python3
"""
Demo script for PTB Core functionality.

This script walks through the builder end to end:
1. Building a block command by command
2. Validating it, before and after an edit
3. Replaying it onto a recording transaction
4. Exporting it as TypeScript and Python source
"""

import json

from ptb_core import (
    PTBlock, PTBArgs, GraphValidator, ExecutionBuilder, PTBTemplate, emit,
)


RECIPIENT = "0x" + "ab" * 32


def demo_build_block():
    """Demonstrate building a split-and-transfer block."""
    print("=== Demo 1: Building a Block ===")

    block = PTBlock()
    split = block.add_split_coins(PTBArgs.gas(), [PTBArgs.input(1000000)])
    transfer = block.add_transfer_objects([PTBArgs.result(0)], PTBArgs.input(RECIPIENT))

    print(f"Added {split.type_name} as {split.id}")
    print(f"Added {transfer.type_name} as {transfer.id}")
    print(json.dumps(block.to_json(), indent=2))
    print()
    return block


def demo_validation(block):
    """Demonstrate validation before and after breaking an edit."""
    print("=== Demo 2: Validation ===")

    validator = GraphValidator()
    report = validator.validate(block)
    print(f"Valid: {report.is_valid} ({len(report.errors)} errors, {len(report.warnings)} warnings)")

    block.update('cmd-1', amounts=[PTBArgs.input(0)])
    broken = validator.validate(block)
    print("After setting the amount to 0:")
    for error in broken.errors:
        print(f"  error: {error}")

    block.update('cmd-1', amounts=[PTBArgs.input(1000000)])
    print()


def demo_execution(block):
    """Demonstrate replaying the block onto a transaction."""
    print("=== Demo 3: Execution Replay ===")

    built = ExecutionBuilder().build(block)
    print(json.dumps(built.transaction.to_dict(), indent=2))
    print()


def demo_code_export(block):
    """Demonstrate exporting the block as source code."""
    print("=== Demo 4: Code Export ===")

    for language in ('typescript', 'python'):
        print(f"--- {language} ---")
        print(emit(block, language))


def demo_templates(block):
    """Demonstrate saving and restoring a template."""
    print("=== Demo 5: Templates ===")

    template = block.to_template(name="Pay Alice", description="Send one coin to Alice")
    stored = template.to_dict()
    restored = PTBlock.from_template(PTBTemplate.from_dict(stored))
    print(f"Template {template.id} restored with {restored.count()} commands")
    print()


def main():
    """Run all demos."""
    print("PTB Core Demo")
    print("=" * 50)
    print()

    block = demo_build_block()
    demo_validation(block)
    demo_execution(block)
    demo_code_export(block)
    demo_templates(block)

    print("Demo completed!")


if __name__ == "__main__":
    main()
