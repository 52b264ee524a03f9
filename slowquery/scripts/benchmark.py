"""Benchmark the rule catalog on known-bad queries and on adversarial input."""

import time

from slowquery.services.analyzer.rules_engine import RULES, analyze, find_matches, summarize

BAD_QUERIES = [
    {"name": "SELECT Star", "query": "SELECT * FROM users WHERE id = 1;"},
    {"name": "Leading Wildcard", "query": "SELECT id FROM products WHERE name LIKE '%phone%';"},
    {"name": "NOT LIKE Wildcard", "query": "SELECT id FROM products WHERE name NOT LIKE '%test';"},
    {"name": "Join On IS NULL", "query": "SELECT a.id FROM t1 a JOIN t2 b ON b.ref IS NULL;"},
    {"name": "Left Join", "query": "SELECT u.id FROM users u LEFT JOIN orders o ON u.id = o.user_id;"},
    {"name": "Right Join", "query": "SELECT u.id FROM users u RIGHT JOIN orders o ON u.id = o.user_id;"},
    {"name": "Equals NULL", "query": "SELECT id FROM users WHERE deleted_at = NULL;"},
    {"name": "Not Equals NULL", "query": "SELECT id FROM users WHERE deleted_at <> NULL;"},
    {"name": "Order By Limit", "query": "SELECT id FROM logs ORDER BY created_at DESC LIMIT 10;"},
    {"name": "Order By Rand", "query": "SELECT id FROM quotes ORDER BY RAND();"},
    {"name": "Group By Having", "query": "SELECT dept, COUNT(*) FROM emp GROUP BY dept HAVING COUNT(*) > 5;"},
    {"name": "IN Subquery", "query": "SELECT id FROM users WHERE id IN (SELECT user_id FROM orders);"},
    {"name": "Derived Table", "query": "SELECT t.id FROM (SELECT id FROM users) t;"},
    {"name": "Function In Where", "query": "SELECT id FROM events WHERE created = NOW();"},
    {"name": "Distinct", "query": "SELECT DISTINCT city FROM addresses;"},
    {"name": "OR Condition", "query": "SELECT id FROM users WHERE email = 'a' OR username = 'b';"},
    {"name": "Temp Table", "query": "SELECT id INTO #recent FROM orders;"},
    {"name": "Clean Query", "query": "SELECT id, email FROM users WHERE id = 42;"},
]

# Inputs that make the unbounded ".*" gaps do the most work: an opening
# keyword followed by a long tail that never completes the pattern.
ADVERSARIAL_SEEDS = {
    "join_no_is_null": "JOIN t ON a = b ",
    "where_no_or": "WHERE col = 1 AND ",
    "order_by_no_limit": "ORDER BY x, ",
}


def run_corpus() -> None:
    print(f"{'Benchmark Name':<24} | {'Findings':<8} | {'Rules':<8} | {'Time (ms)':<9}")
    print("-" * 60)

    total_findings = 0
    for test in BAD_QUERIES:
        start_time = time.perf_counter()
        findings = analyze(test["query"])
        messages = summarize(test["query"])
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        print(f"{test['name']:<24} | {len(findings):<8} | {len(messages):<8} | {elapsed_ms:<9.3f}")
        total_findings += len(findings)

    print("-" * 60)
    print(f"Total Benchmarks: {len(BAD_QUERIES)}")
    print(f"Total Findings: {total_findings}")

    print()
    print("Per-rule hit counts over the corpus:")
    corpus = "\n".join(test["query"] for test in BAD_QUERIES)
    for rule in RULES:
        print(f"  {rule.code} {rule.name:<24} {len(find_matches(rule, corpus))}")


def run_adversarial(sizes=(1_000, 2_000, 4_000, 8_000)) -> None:
    print()
    print(f"{'Seed':<20} | {'Chars':<8} | {'Time (ms)':<9}")
    print("-" * 45)
    for name, seed in ADVERSARIAL_SEEDS.items():
        for size in sizes:
            text = (seed * (size // len(seed) + 1))[:size]
            start_time = time.perf_counter()
            analyze(text)
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            print(f"{name:<20} | {size:<8} | {elapsed_ms:<9.1f}")


if __name__ == "__main__":
    run_corpus()
    run_adversarial()
