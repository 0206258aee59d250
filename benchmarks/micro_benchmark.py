#!/usr/bin/env python3
"""
Micro-benchmark: isolate the cost of each bridge stage.
"""

import sys
import time
import numpy as np
from pathlib import Path
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

# SQLBRIDGE_* settings (library path, busy timeout) may live in .env
load_dotenv(Path(__file__).parent.parent / '.env')

import sqlbridge

# Config
N_ROWS = 10000
N_ITERATIONS = 1000


def p50(times):
    return np.percentile(times, 50)


print("=" * 70)
print("SQLBRIDGE MICRO-BENCHMARKS")
print("=" * 70)

db = sqlbridge.open(":memory:")
db("CREATE TABLE items(id INTEGER PRIMARY KEY, name TEXT, score REAL)")

# ============================================================================
# Test 1: Trivial statement (prepare + step + finalize)
# ============================================================================
print("\n1. TRIVIAL STATEMENT")
times = []
for _ in range(N_ITERATIONS):
    start = time.perf_counter_ns()
    db("SELECT 1")
    times.append((time.perf_counter_ns() - start) / 1000)
print(f"   SELECT 1: {p50(times):.1f}µs")

# ============================================================================
# Test 2: Parameter binding by type
# ============================================================================
print("\n2. PARAMETER BINDING")
for label, value in [("null", None), ("int", 42), ("float", 3.25),
                     ("text", "x" * 64), ("blob", b"\x00" * 64)]:
    times = []
    for _ in range(N_ITERATIONS):
        start = time.perf_counter_ns()
        db("SELECT ?", value)
        times.append((time.perf_counter_ns() - start) / 1000)
    print(f"   {label:6s}: {p50(times):.1f}µs")

# ============================================================================
# Test 3: Inserts (one statement per call)
# ============================================================================
print("\n3. INSERT")
times = []
for i in range(N_ROWS):
    start = time.perf_counter_ns()
    db("INSERT INTO items(name, score) VALUES (?, ?)", f"item-{i}", i * 0.5)
    times.append((time.perf_counter_ns() - start) / 1000)
print(f"   p50: {p50(times):.1f}µs per row")

# ============================================================================
# Test 4: Row materialization
# ============================================================================
print("\n4. ROW DECODE")
start = time.perf_counter_ns()
rows = db("SELECT * FROM items")
elapsed = (time.perf_counter_ns() - start) / 1000
print(f"   {len(rows)} rows: {elapsed:.1f}µs ({elapsed / len(rows) * 1000:.1f}ns per row)")

# ============================================================================
# Test 5: Multi-statement script
# ============================================================================
print("\n5. SCRIPT (3 statements)")
times = []
for _ in range(N_ITERATIONS):
    start = time.perf_counter_ns()
    db("SELECT 1; SELECT 2; SELECT 3")
    times.append((time.perf_counter_ns() - start) / 1000)
print(f"   p50: {p50(times):.1f}µs")

db.close()

print("\n" + "=" * 70)
