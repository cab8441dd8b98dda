#!/usr/bin/env python3
"""
Concurrent ID Generation Demo

Simulates request-handling threads creating entities at the same time,
all sharing one injected generator.

Flow:
  1. Build one generator from environment settings
  2. 16 worker threads each create exam submissions
  3. Check: no duplicate ids, each thread's ids increase, and sorting
     by id reproduces the per-thread creation order

Run:
    python examples/demo_concurrency.py
"""

import logging
import os
import sys
import threading
import time
from collections import Counter

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from academy_ids import (
    IdentifiedRecord,
    TimeOrderedIdGenerator,
    extract_timestamp,
)


class ExamSubmission(IdentifiedRecord):
    student_name: str
    exam_name: str
    score: int = 0


# ============================================================
# Workers
# ============================================================

def worker(
    generator: TimeOrderedIdGenerator,
    worker_no: int,
    count: int,
    out: list,
) -> None:
    created = []
    for i in range(count):
        sub = ExamSubmission(
            student_name=f"student-{worker_no:02d}-{i:04d}",
            exam_name="Grade 2 final",
        ).on_create(generator)
        created.append(sub)
    out[worker_no] = created


# ============================================================
# Main
# ============================================================

def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    generator = TimeOrderedIdGenerator.from_settings()
    threads_n, per_thread = 16, 2_000
    results = [None] * threads_n

    start = time.perf_counter()
    threads = [
        threading.Thread(target=worker, args=(generator, n, per_thread, results))
        for n in range(threads_n)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    elapsed = time.perf_counter() - start

    submissions = [s for chunk in results for s in chunk]
    ids = [s.id for s in submissions]

    print("━━━ Concurrent Generation ━━━")
    print(f"  Threads:      {threads_n}")
    print(f"  Submissions:  {len(submissions)} in {elapsed:.3f}s")
    print(f"  Distinct ids: {len(set(ids))}")

    ordered = all(
        a.id < b.id for chunk in results for a, b in zip(chunk, chunk[1:])
    )
    print(f"  Per-thread order preserved: {'✓' if ordered else '✗'}")

    per_ms = Counter(extract_timestamp(i) for i in ids)
    busiest_ms, busiest_n = per_ms.most_common(1)[0]
    print(f"  Milliseconds spanned: {len(per_ms)}")
    print(f"  Busiest millisecond:  {busiest_ms} ({busiest_n} ids)")

    first = min(submissions, key=lambda s: s.id)
    last = max(submissions, key=lambda s: s.id)
    print(f"  First: {first.id}  {first.created_at.isoformat()}")
    print(f"  Last:  {last.id}  {last.created_at.isoformat()}")


if __name__ == "__main__":
    main()
