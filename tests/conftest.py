"""Pytest configuration and shared fixtures.

This module provides common fixtures used across the test suite, including
sample JavaScript and TypeScript snippets and analyzer instances.
"""

import pytest

from core.analysis.dataflow import DataFlowAnalyzer
from core.analysis.dependencies import DependencyGraphBuilder
from core.analysis.metrics import ComplexityAnalyzer
from core.analysis.patterns import PatternDetector
from core.analysis.practices import BestPracticeChecker
from core.analysis.semantic import SemanticAnalyzer

# ---------------------------------------------------------------------------
# Sample JavaScript Code Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def simple_function_code() -> str:
    """Single function without branches."""
    return "function add(a, b) { return a + b }"


@pytest.fixture
def nested_if_code() -> str:
    """Three nested if statements."""
    return """function classify(a, b, c) {
  if (a) {
    if (b) {
      if (c) {
        return 1;
      }
    }
  }
  return 0;
}
"""


@pytest.fixture
def async_function_code() -> str:
    """Async arrow function without error handling."""
    return """const loadUser = async (id) => {
  const response = await fetch(`/api/users/${id}`);
  return response.json();
};
"""


@pytest.fixture
def guarded_async_code() -> str:
    """Async function with a try/catch block."""
    return """async function loadUser(id) {
  try {
    const response = await fetch(`/api/users/${id}`);
    return response.json();
  } catch (error) {
    return null;
  }
}
"""


@pytest.fixture
def class_code() -> str:
    """Class with a superclass, a field and methods."""
    return """class UserService extends BaseService {
  cache = new Map();

  constructor(client) {
    super();
    this.client = client;
  }

  async getUser(id) {
    try {
      return await this.client.get(id);
    } catch (error) {
      return null;
    }
  }
}
"""


@pytest.fixture
def singleton_code() -> str:
    """Classic singleton with a static instance."""
    return """class Config {
  static instance = null;

  static getInstance() {
    if (!Config.instance) {
      Config.instance = new Config();
    }
    return Config.instance;
  }
}
"""


@pytest.fixture
def imports_code() -> str:
    """Every import form: default, named, namespace, require and dynamic."""
    return """import React from 'react';
import { useState, useEffect as onEffect } from 'react';
import * as path from 'path';
import './styles.css';
const fs = require('fs');
const helpers = require('./helpers');

async function lazy() {
  return import('./lazy-module');
}
"""


@pytest.fixture
def exports_code() -> str:
    """Named, default and clause exports."""
    return """export function render() {}
export class Widget {}
export const VERSION = '1.0.0';
const internal = 1;
export { internal as publicName };
export default Widget;
"""


@pytest.fixture
def variables_code() -> str:
    """let/var bindings at several scopes with reassignments."""
    return """let counter = 0;
var total = 10;

function tick() {
  let step = 1;
  counter += step;
  {
    let inner = 2;
  }
}

for (let i = 0; i < 3; i++) {
  total = total - i;
}
"""


@pytest.fixture
def constants_code() -> str:
    """Top-level constants with literal and non-literal initializers."""
    return """const NAME = 'codesight';
const LIMIT = 42;
const RATIO = 0.5;
const ENABLED = true;
const ITEMS = [1, 2, 3];
const OPTIONS = { debug: false };
const GREETING = `hello ${NAME}`;
const handler = () => {};

function local() {
  const hidden = 1;
  return hidden;
}
"""


@pytest.fixture
def react_component_code() -> str:
    """React component using hooks and fetch."""
    return """import React, { useState, useEffect } from 'react';

export function UserProfile({ userId }) {
  const [user, setUser] = useState(null);

  useEffect(() => {
    fetch(`/api/users/${userId}`).then((r) => r.json()).then(setUser);
  }, [userId]);

  return user ? user.name : 'Loading';
}
"""


@pytest.fixture
def typescript_code() -> str:
    """TypeScript class implementing an interface."""
    return """import type { Repository } from './repository';

interface Greeter {
  greet(name: string): string;
}

export class FriendlyGreeter extends BaseGreeter implements Greeter {
  private prefix: string = 'Hello';

  greet(name: string, punctuation?: string): string {
    return `${this.prefix}, ${name}${punctuation ?? '!'}`;
  }
}

export function sum(a: number, b: number = 0, ...rest: number[]): number {
  return a + b + rest.reduce((x, y) => x + y, 0);
}
"""


# ---------------------------------------------------------------------------
# Analyzer Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def complexity_analyzer() -> ComplexityAnalyzer:
    """Create a ComplexityAnalyzer instance."""
    return ComplexityAnalyzer()


@pytest.fixture
def dependency_builder() -> DependencyGraphBuilder:
    """Create a DependencyGraphBuilder instance."""
    return DependencyGraphBuilder()


@pytest.fixture
def pattern_detector() -> PatternDetector:
    """Create a PatternDetector instance."""
    return PatternDetector()


@pytest.fixture
def practice_checker() -> BestPracticeChecker:
    """Create a BestPracticeChecker with default thresholds."""
    return BestPracticeChecker()


@pytest.fixture
def dataflow_analyzer() -> DataFlowAnalyzer:
    """Create a DataFlowAnalyzer instance."""
    return DataFlowAnalyzer()


@pytest.fixture
def semantic_analyzer() -> SemanticAnalyzer:
    """Create a SemanticAnalyzer instance."""
    return SemanticAnalyzer()
