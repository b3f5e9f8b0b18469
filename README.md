# cfrcore

`cfrcore` holds building blocks for FM-index based metagenomic read classification:

* **Compact bit-level structures.** Packed fixed-width integer arrays, interleaved
  two-level arrays, a block-compressed (RRR-style) bitvector, rank indexes and a
  sampled select index.
* **Read-level helpers.** Hit scoring and strand selection, paired-end read merging,
  and writing classification results.

The package has no runtime dependencies.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Packed arrays (`cfrcore.fixed_size_array`)

`FixedSizeElemArray(elem_bits, size)` stores `size` unsigned integers of `elem_bits`
bits each. `FixedSizeElemArray.from_values(values, elem_bits)` builds one from an
iterable; a width of 0 or less picks the smallest width that fits every value.

```python
from cfrcore.fixed_size_array import FixedSizeElemArray

arr = FixedSizeElemArray.from_values([3, 1, 2, 0], 2)
arr[1] = 3
print(list(arr))          # [3, 3, 2, 0]
arr.append(1)
print(len(arr))           # 5
print(arr.format(","))    # "3,3,2,0,1,\n"
```

The array also offers `read`/`write`, `pack_read`, `pack_read_rev`, `pack_write`,
`prefix_match_len`, `subrange_compare`, `prefix_copy`, `resize`, `reserve`, and binary
`save(fp)` / `FixedSizeElemArray.load(fp)`. Out-of-range indexes raise `IndexError`.

The same module has helpers for plain bitvectors held as lists of 64-bit words:
`words_for_bits`, `bit_read`, `bit_set`, `bits_read`, `bits_write` and `popcount`.

## Interleaved arrays (`cfrcore.interleaved_array`)

* `InterleavedFixedSizeElemArray(l0, n0, l1, f1)` holds `n0` level-0 elements of `l0`
  bits, each followed by `f1` level-1 elements of `l1` bits. Use `read(kind, i)` and
  `write(kind, i, x)` with `kind` 0 or 1.
* `Interleaved64FixedSizeElemArray(n0, l1, f1)` does the same with 64-bit level-0
  elements, and each group starts on a word boundary. Use `read0`/`write0` and
  `read1`/`write1`.

Both classes have `resize`, `size0` and `size1`.

## Bitvectors, rank and select

```python
from cfrcore.fixed_size_array import words_for_bits, bit_set
from cfrcore.bitvector import CompressedBitvector
from cfrcore.rank import Rank9Index, RankIndex
from cfrcore.select import SelectIndex, SelectSpeed

n = 1000
words = [0] * words_for_bits(n)
for pos in range(0, n, 7):
    bit_set(words, pos)

bv = CompressedBitvector(words, n)
bv.access(14), bv.rank1(20), bv.rank0(20), bv.select(3)   # (1, 3, 18, 14)

rank = Rank9Index(words, n)
rank.query(20), rank.query(21, inclusive=False)            # (3, 3)

sel = SelectIndex(words, n, rank, speed=SelectSpeed.RANK_BINARY, type_support=3)
sel.select1(3), sel.select0(1)                             # (14, 1)
```

* `Bitvector` (in `cfrcore.bitvector`) is the abstract interface. It provides `access`,
  `rank1`, `select`, and, built on those, `rank0`, `rank`, `pred` and `succ`.
  `CompressedBitvector` implements it. It stores a one-count per block plus the
  combinatorial index of the block's bit pattern. `select` counts from 1.
* `RankIndex(words, n, block_size)` keeps one absolute count per block (a power of two,
  in words) and relative counts per word. `Rank9Index(words, n)` keeps one absolute
  count per 8 words plus seven packed 9-bit relative counts. It can be saved with
  `save(fp)` and read back with `Rank9Index.load(fp, words)`. On both, `query` clamps
  positions past the end to the last bit.
* `SelectIndex` samples every `block_size`-th one (or zero) and refines the position
  with a `Rank9Index` built over the same bits. `SelectSpeed` picks how much extra data
  is kept: `NONE`, `SAMPLED`, `RANK_BINARY`, `DENSE_SAMPLE` or `CONSTANT`.
  `type_support` is a bit mask: bit 0 enables `select0` and bit 1 enables `select1`.
  Asking for an unsupported kind raises `ValueError`, and an out-of-range index raises
  `IndexError`.

## Classification helpers (`cfrcore.classifier`)

* `ClassifierParams` holds `max_result`, `min_hit_len` and `max_result_per_hit_factor`.
* `ClassifierResult` holds the scores, the hit and query lengths, and the matched
  names and taxonomy ids. `clear()` resets it.
* `BWTHit` is one exact match: a BWT range `sp..ep`, a `length`, an `offset` from the
  read end, and a `strand`.
* `hit_score(length, min_hit_len, adjust=15)` returns `(length - adjust)²`, or 0 for hits
  shorter than the minimum. `hits_score` sums it over a list of hits.
* `infer_min_hit_len(alphabet_size, n)` returns the smallest hit length, starting from 23
  and going up to at most 33, whose k-mer space is at least 100 times the index size.
* `select_strand_hits(plus_hits, minus_hits, min_hit_len)` returns copies of the hits of
  the better-scoring strand. On a tie it returns both strands, plus strand first.

## Merging read pairs (`cfrcore.read_merger`)

`ReadPairMerger.merge(r1, q1, r2, q2)` compares mate 1 with the reverse complement of
mate 2. It first checks for read-through (when `check_read_through` is true) and then
for a plain overlap. It returns a `MergeResult` with fields `kind` (a `MergeKind`:
`NONE`, `MERGED` or `READ_THROUGH`), `seq`, `qual`, `overlap_size`, `offset` and
`best_match_count`.

```python
from cfrcore.read_merger import ReadPairMerger, reverse_complement

merger = ReadPairMerger()
result = merger.merge(r1, q1, r2, q2)
if result.merged:
    print(result.kind.name, result.seq, result.qual)

reverse_complement("ACGTN")   # "NACGT"
```

## Writing results (`cfrcore.result_writer`)

`ResultWriter(output, has_barcode, has_umi)` writes one tab-separated line for each
match, or one `unclassified` line. `output` is a text stream or a path; when `output` is
`None` the writer uses standard output.

```python
import sys
from cfrcore.classifier import ClassifierResult
from cfrcore.result_writer import ResultWriter

result = ClassifierResult(score=100, hit_length=25, query_length=100,
                          seq_str_names=["seqA"], tax_ids=[562])
with ResultWriter(sys.stdout) as writer:
    writer.write_header()
    writer.write("read1", "ACGT", "IIII", None, None, None, None, result)
    print(writer.summary())
```

`set_output_reads(prefix, has_mate, has_barcode, has_umi, category)` also copies reads
to gzip files. Category 0 is for unclassified reads and any other value for classified
reads. The files are `prefix.fq.gz`, or `prefix_1.fq.gz` and `prefix_2.fq.gz` for
mates, plus `prefix_bc.fa.gz` and `prefix_um.fa.gz` when barcodes or UMIs are
requested. Reads with qualities are written as FASTQ records and reads without as
FASTA records. `summary()` returns the processed and classified counts and also logs
them.

## What this package does not do

`cfrcore` does not build or load an FM index, and it has no taxonomy handling. As a
result it cannot itself search reads against a database or resolve sequence ids to
taxa. It has no command-line tools. The classification helpers score and pick hits
that some other component has already found, and `ResultWriter` formats results
that some other component has produced.