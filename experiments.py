"""
Huffman coding experiments

Encodes synthetic datasets end to end (build codes, encode, pack to bytes,
unpack, decode) and records timings and compression figures

Outputs (in --outdir):
  - metrics.csv     (raw row per run per dataset)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp2_max_kb 4096
  python experiments.py --text "encode this huffman string"
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Callable

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import huffman as huff
import bitpack


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


# Code statistics

def average_code_length(code_map: Dict[object, str], freq_map: Dict[object, int]) -> float:
    # bits per input symbol
    total = sum(freq_map.values())
    if total == 0:
        return 0.0
    return sum(len(code_map[s]) * f for s, f in freq_map.items()) / total

def shannon_entropy(freq_map: Dict[object, int]) -> float:
    total = sum(freq_map.values())
    if total == 0:
        return 0.0
    h = 0.0
    for f in freq_map.values():
        p = f / total
        h -= p * math.log2(p)
    return h


# Synthetic dataset generators

def _sample_cdf(rng: random.Random, cdf: List[float]) -> int:
    r = rng.random()
    lo, hi = 0, len(cdf) - 1
    while lo < hi:
        mid = (lo + hi) // 2
        if r <= cdf[mid]:
            hi = mid
        else:
            lo = mid + 1
    return lo

def _cdf(weights: List[float]) -> List[float]:
    total = sum(weights)
    out = []
    acc = 0.0
    for w in weights:
        acc += w / total
        out.append(acc)
    return out

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    others = [i for i in range(256) if i != dominant]
    return bytes(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    cdf = _cdf([1.0 / ((i + 1) ** s) for i in range(alphabet)])
    return bytes(_sample_cdf(rng, cdf) for _ in range(size))

ENGLISH_CHARS = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"

def _english_weight(ch: str) -> float:
    if ch == ' ':
        return 13.0
    if ch == '\n':
        return 1.5
    if ch.lower() in "etaoinshrdlu":
        return 6.0
    if ch.lower() in "cmfwgypbvk":
        return 2.5
    return 1.2

def gen_english_like(size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    cdf = _cdf([_english_weight(ch) for ch in ENGLISH_CHARS])
    return bytes(ord(ENGLISH_CHARS[_sample_cdf(rng, cdf)]) for _ in range(size))

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform16": lambda size, seed: gen_uniform(size, alphabet=16, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.99, seed=seed),
    "single_symbol": lambda size, seed: b"A" * size,
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> Tuple[str, bytes]:
    # unknown names fall back to uniform256 so one typo does not end the whole run
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        return f"{name}_fallback_uniform256", gen_uniform(size_bytes, alphabet=256, seed=seed)
    return name, fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    file_size_bytes: int
    run_id: int
    unique_symbols: int

    build_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    compressed_bytes: int
    pad_bits: int
    compression_ratio: float
    avg_code_bits: float
    entropy_bits: float

    correctness_ok: int  # 1 or 0


def run_one(data: bytes) -> MetricRow:
    """Build codes, encode, pack, unpack and decode one dataset"""
    if not data:
        raise ValueError("dataset must not be empty")

    t0 = now_ns()
    ft = huff.count_frequencies(data)
    root = huff.build_huffman_tree(ft)
    code_map = huff.generate_huffman_codes(root)
    t1 = now_ns()

    packed, pad_bits = bitpack.pack_bits(huff.huffman_encode(data, code_map))
    t2 = now_ns()

    decoded = huff.huffman_decode(bitpack.unpack_bits(packed, pad_bits), code_map)
    t3 = now_ns()

    build_ms = ns_to_ms(t1 - t0)
    encode_ms = ns_to_ms(t2 - t1)
    decode_ms = ns_to_ms(t3 - t2)

    return MetricRow(
        exp_name="",
        dataset_name="",
        file_size_bytes=len(data),
        run_id=0,
        unique_symbols=len(ft),
        build_ms=build_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=build_ms + encode_ms + decode_ms,
        compressed_bytes=len(packed),
        pad_bits=pad_bits,
        compression_ratio=len(packed) / len(data),
        avg_code_bits=average_code_length(code_map, ft),
        entropy_bits=shannon_entropy(ft),
        correctness_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


SUMMARY_METRICS = ("compression_ratio", "avg_code_bits", "build_ms", "encode_ms", "decode_ms", "total_ms")

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, file_size_bytes and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        key_to.setdefault((r.exp_name, r.dataset_name, r.file_size_bytes), []).append(r)

    fields = ["exp_name", "dataset_name", "file_size_bytes", "n_runs", "entropy_bits"]
    for m in SUMMARY_METRICS:
        fields += [f"{m}_mean", f"{m}_stdev"]
    fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for (exp_name, dataset_name, size_b), items in sorted(key_to.items()):
            row = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "n_runs": len(items),
                "entropy_bits": statistics.mean(x.entropy_bits for x in items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                row[f"{m}_mean"], row[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(row)


# Plotting

def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))
    x = list(range(len(datasets)))

    def mean_for(dataset: str, field: str) -> float:
        return statistics.mean(getattr(r, field) for r in exp_rows if r.dataset_name == dataset)

    plt.figure()
    plt.plot(x, [mean_for(d, "avg_code_bits") for d in datasets], marker="o", label="huffman")
    plt.plot(x, [mean_for(d, "entropy_bits") for d in datasets], marker="x", linestyle="--", label="entropy")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Experiment 1: Average Code Length vs Entropy")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_code_length.png", dpi=200)
    plt.close()

    plt.figure()
    plt.bar(x, [mean_for(d, "compression_ratio") for d in datasets])
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Compressed Bytes / Original Bytes")
    plt.title("Experiment 1: Compression Ratio by Distribution")
    plt.tight_layout()
    plt.savefig(outdir / "exp1_compression_ratio.png", dpi=200)
    plt.close()


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))

        def mean_size(size: int, field: str) -> float:
            return statistics.mean(getattr(r, field) for r in dist_rows if r.file_size_bytes == size)

        plt.figure()
        for field, label in (("build_ms", "build"), ("encode_ms", "encode"), ("decode_ms", "decode")):
            plt.plot(sizes, [mean_size(s, field) for s in sizes], marker="o", label=label)
        plt.xscale("log", base=2)
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Time (ms)")
        plt.title(f"Experiment 2: Stage Time vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_stage_time_{dist}.png", dpi=200)
        plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def power_of_two_sizes(min_bytes: int, max_bytes: int) -> List[int]:
    sizes: List[int] = []
    s = min_bytes
    while s <= max_bytes:
        sizes.append(s)
        s *= 2
    return sizes

def show_text(text: str) -> int:
    try:
        code = huff.encode(text)
    except huff.HuffmanError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    for symbol, bits in sorted(code.code_table.items(), key=lambda p: (len(p[1]), p[0])):
        print(f"{symbol!r}\t{bits}")
    print(code.compressed)
    decoded = huff.decode(code)
    print(f"{len(text)} symbols -> {len(code.compressed)} bits, round trip {'ok' if decoded == text else 'FAILED'}")
    return 0 if decoded == text else 1

def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Huffman coding experiments")
    ap.add_argument("--text", type=str, default=None, help="Encode one string, print its code table and bits, and exit")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--no_plots", action="store_true", help="Write CSV files only")

    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")

    ap.add_argument("--exp1_size_kb", type=int, default=64, help="Experiment 1 fixed file size in KB")
    ap.add_argument("--exp1_generators", type=str, default="uniform256,zipf128,repetitive90,english_like",
                    help="Comma-separated dataset generator names for experiment 1")

    ap.add_argument("--exp2_min_kb", type=int, default=1, help="Experiment 2 min size in KB (power-of-two growth)")
    ap.add_argument("--exp2_max_kb", type=int, default=256, help="Experiment 2 max size in KB")
    ap.add_argument("--exp2_generators", type=str, default="uniform256,english_like",
                    help="Comma-separated dataset generator names for experiment 2")
    return ap

def main(argv: List[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if args.text is not None:
        return show_text(args.text)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                dataset_name, data = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                row = run_one(data)
                row.exp_name = "exp1_distribution"
                row.dataset_name = dataset_name
                row.run_id = run_id
                rows.append(row)

    # Experiment 2: size scaling
    if not args.no_exp2:
        sizes = power_of_two_sizes(max(1, args.exp2_min_kb) * 1024, max(1, args.exp2_max_kb) * 1024)
        for gen_name in parse_csv_list(args.exp2_generators):
            for size_b in sizes:
                for run_id in range(1, args.runs + 1):
                    dataset_name, data = generate_dataset(gen_name, size_b, args.seed + 10_000 + size_b + run_id)
                    row = run_one(data)
                    row.exp_name = "exp2_size_scaling"
                    row.dataset_name = dataset_name
                    row.run_id = run_id
                    rows.append(row)

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    if not args.no_plots:
        plot_experiment_1(rows, outdir)
        plot_experiment_2(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        print("Charts saved in:", outdir.resolve())
    return 0 if ok_rate == 1.0 or not rows else 1


if __name__ == "__main__":
    raise SystemExit(main())
