# warpbench

Building blocks for benchmarking S3-compatible object storage:

- **Data generators** (`warpbench.generator`) that produce named objects with
  seekable, size-limited readers: AES-GCM scrambled random data or tables of
  random CSV fields.
- **Operation analysis** (`warpbench.bench.operations`, `warpbench.bench.sizes`,
  `warpbench.bench.csvio`) for recorded benchmark operations: sorting,
  filtering, time ranges, throughput, log10 size segments, and reading and
  writing the tab-separated operations format.
- **Workload distributions** (`warpbench.bench.distribution`) for mixed and
  versioned benchmarks, which hand out operation types in fixed proportions
  and track the objects that exist.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Generating data

```python
from warpbench.generator.options import with_size, with_csv, with_random_data
from warpbench.generator.sources import new

source = new(with_size(1 << 20), with_random_data().apply())
obj = source.object()
payload = obj.reader.read(-1)
assert len(payload) == obj.size

csv_source = new(with_size(64 << 10), with_csv().size(5, 100).apply())
table = csv_source.object()
print(table.name, table.content_type)
```

`new(*options)` builds a `RandomSource` (the default) or a `CsvSource`. Each
call to `object()` returns a new `Object` with a new name and new data; its
`reader` serves exactly `size` bytes and supports `seek`, `tell` and `reset`
so an upload can be retried from the start. A CSV table is repeated as often
as needed to reach the size. `new_fn(*options)` validates the options and
returns a factory that builds a fresh, independent source on each call.

Options:

- `with_size(n)` and `with_min_max_size(min_size, max_size)` set object sizes;
  `with_random_size(True)` picks exponentially distributed sizes up to the
  maximum (see `get_exp_rand_size` in `warpbench.generator.objects`).
- `with_custom_prefix(prefix)` and `with_prefix_size(n)` (0 to 16 random
  characters) put object names under a prefix.
- `with_random_data()` returns `RandomOpts` with `size(block)` and
  `rng_seed(seed)`; `with_csv()` returns `CsvOpts` with `size(cols, rows)`,
  `comma(c)`, `field_len(min_len, max_len)` and `rng_seed(seed)`. Call
  `.apply()` on either to turn it into an option.

Invalid options raise `ValueError`.

## Analysing operations

`Operations` is a `list` of `Operation` records (start, end, first byte,
type, error, file, client, endpoint, objects per operation, size, thread).

```python
from warpbench.bench.csvio import operations_from_csv, write_csv
from warpbench.bench.sizes import split_sizes

with open("results.csv") as stream:
    ops = operations_from_csv(stream, False, 0, 0, None)

for op_type, part in ops.sort_split_by_op_type().items():
    start, end = part.active_time_range(True)
    print(op_type, len(part), part.avg_duration(), part.n_errors())

for segment in split_sizes(ops, 0.05):
    print(segment.size_string(), len(segment.ops))
```

`write_csv(ops, stream, comment)` writes operations in the same
tab-separated format, with the comment appended as `# ` lines.
`operations_from_csv` skips `offset` records, stops after `limit` when it is
positive, and with `analyze_only` maps client ids to single letters and file
names to numbers. `Operation.bytes_per_sec()` returns a `Throughput`, a float
whose `str()` uses B/s, KiB/s, MiB/s, GiB/s or TiB/s.

## Workload distributions

```python
from warpbench.bench.distribution import MixedDistribution

dist = MixedDistribution({"GET": 45, "PUT": 15, "DELETE": 10, "STAT": 30})
dist.generate(2500)
next_operation = dist.get_op()
```

`generate` normalizes the shares, builds a fixed shuffled sequence of about
1000 operations and raises `ValueError` for negative shares, a zero total,
or (for `MixedDistribution`) more DELETE than PUT. `add_obj`, `random_obj`,
`delete_random_obj` and `objects` manage the pool of existing objects.
`VersionedDistribution` does the same for workloads that keep several
versions of each object, with `random_obj_read` and `new_version`.

## What this package does not do

It contains no S3 client and no benchmark runner: it does not create
buckets, upload or download objects, time live requests, or clean up after a
run. There is no command-line tool and no report printer; the pieces here
are meant to be driven by your own code.