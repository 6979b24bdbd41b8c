"""Query services: parameter policy, in-memory evaluators and backend routing."""
