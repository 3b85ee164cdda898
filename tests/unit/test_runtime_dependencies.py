#!/usr/bin/env python3
# Copyright 2025 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.
"""Tests that runtime dependencies are installed for default setups."""

import re
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _requirement_names(lines):
    names = set()
    for line in lines:
        line = line.strip().strip('",')
        if not line or line.startswith("#"):
            continue
        match = re.match(r"[A-Za-z0-9_.\-]+", line)
        if match:
            names.add(match.group(0).lower())
    return names


def test_requirements_match_pyproject_dependencies() -> None:
    """requirements.txt must list the same runtime packages as pyproject.toml."""
    requirements = _requirement_names((ROOT / "requirements.txt").read_text(encoding="utf-8").splitlines())
    pyproject = (ROOT / "pyproject.toml").read_text(encoding="utf-8")
    block = re.search(r"^dependencies = \[(.*?)^\]", pyproject, re.MULTILINE | re.DOTALL)
    assert block is not None, "Expected a dependencies list in pyproject.toml."
    declared = _requirement_names(block.group(1).splitlines())
    assert requirements == declared


def test_default_venv_installs_runtime_requirements() -> None:
    """Ensure default venv setup installs runtime dependencies."""
    contents = (ROOT / "Makefile").read_text(encoding="utf-8")
    lines = contents.splitlines()
    target_index = next((index for index, line in enumerate(lines) if line.strip() == "$(VENV):"), None)
    assert target_index is not None, "Expected $(VENV) target not found in Makefile."
    recipe_lines = []
    for line in lines[target_index + 1 :]:
        if line.startswith("\t"):
            recipe_lines.append(line)
            continue
        if line.strip() == "":
            continue
        break
    recipe_block = "\n".join(recipe_lines)
    pattern = r"\$\(VENV\)/bin/pip\s+install\b[^\n]*requirements\.txt"
    assert re.search(pattern, recipe_block), "Expected runtime requirements to be installed in $(VENV) target."
