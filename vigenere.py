"""
---
version: 0.3.0
created: 2026-10-12
updated: 2026-10-19
---

vigenere.py — Shared module for Vigenere cipher cryptanalysis.

Seven sections:
  1. Data constants (alphabet, English reference frequencies)
  2. Alphabet model (letter <-> index, wraparound letter arithmetic)
  3. Codec (normalize, encrypt, decrypt)
  4. Ciphertext store (frequency sampling, coincidence counting)
  5. Cryptanalysis (key-length ranking, key prediction)
  6. Stats (index of coincidence, letter-frequency test)
  7. Output utils (formatting, wrapping, plots)

The method is the textbook one from Trappe & Washington, "Introduction to
Cryptography", sections 2.3.1 (displacement coincidences) and 2.3.3
(frequency-vector dot products).
"""

from __future__ import annotations

import math
import string
import warnings
from collections import Counter
from pathlib import Path
from typing import NamedTuple, Sequence

import numpy as np

# ============================================================================
# 1. DATA CONSTANTS
# ============================================================================

ALPHABET: str = string.ascii_uppercase
NUM_LETTERS: int = len(ALPHABET)

# Output symbol for letter arithmetic on anything that is not A-Z.
UNKNOWN_LETTER: str = "?"

# Column width for displaying cipher text and messages.
DISPLAY_COLUMNS: int = 70

# English letter frequencies (Trappe & Washington, Table 2.1).
ENGLISH_FREQ: dict[str, float] = {
    "A": 0.082, "B": 0.015, "C": 0.028, "D": 0.043, "E": 0.127,
    "F": 0.022, "G": 0.020, "H": 0.061, "I": 0.070, "J": 0.002,
    "K": 0.008, "L": 0.040, "M": 0.024, "N": 0.067, "O": 0.075,
    "P": 0.019, "Q": 0.001, "R": 0.060, "S": 0.063, "T": 0.091,
    "U": 0.028, "V": 0.010, "W": 0.023, "X": 0.001, "Y": 0.020,
    "Z": 0.001,
}

# Same table as an A..Z ordered vector, for dot products.
REFERENCE_FREQUENCIES: np.ndarray = np.array([ENGLISH_FREQ[c] for c in ALPHABET], dtype=float)
REFERENCE_FREQUENCIES.setflags(write=False)

# The table in thousandths. Every entry has three decimals, so integer dot
# products against letter counts compare exactly.
REFERENCE_MILLI: np.ndarray = np.array([round(ENGLISH_FREQ[c] * 1000) for c in ALPHABET], dtype=np.int64)
REFERENCE_MILLI.setflags(write=False)


# ============================================================================
# 2. ALPHABET MODEL
# ============================================================================

def index_of(letter: str) -> int | None:
    """Return the 0-25 index of an English letter (any case), or None."""
    if len(letter) != 1:
        return None
    index = ALPHABET.find(letter.upper())
    return index if index >= 0 else None


def is_letter(c: str) -> bool:
    return index_of(c) is not None


def normalize_index(i: int) -> int:
    """Wrap any integer into [0, 25]. Python's % is already floor modulo."""
    return i % NUM_LETTERS


def letter_of(index: int) -> str:
    """Uppercase letter for an index, after wrapping it into [0, 25]."""
    return ALPHABET[normalize_index(index)]


def add_letters(a: str, b: str) -> str:
    """
    Add two letters (A=0). Returns UNKNOWN_LETTER if either is not a letter.

    >>> add_letters("Y", "C")
    'A'
    """
    ia, ib = index_of(a), index_of(b)
    if ia is None or ib is None:
        return UNKNOWN_LETTER
    return letter_of(ia + ib)


def sub_letters(a: str, b: str) -> str:
    """
    Subtract letter b from letter a (A=0). Returns UNKNOWN_LETTER if either
    is not a letter.

    >>> sub_letters("A", "B")
    'Z'
    """
    ia, ib = index_of(a), index_of(b)
    if ia is None or ib is None:
        return UNKNOWN_LETTER
    return letter_of(ia - ib)


# ============================================================================
# 3. CODEC — normalize / encrypt / decrypt
# ============================================================================

def normalize_text(raw: str) -> str:
    """Drop all whitespace and uppercase what is left. Nothing else is removed."""
    return "".join(raw.split()).upper()


def _check_key(key: str) -> None:
    if not key:
        raise ValueError("Key cannot be empty")
    if not all(is_letter(c) for c in key):
        warnings.warn(f"Key '{key}' contains non-letters; those positions decode as '{UNKNOWN_LETTER}'")


def encrypt(message: str, key: str) -> str:
    """
    Vigenere-encrypt a message: out[i] = message[i] + key[i mod len(key)].

    Raises:
        ValueError: If the key is empty.
    """
    _check_key(key)
    n = len(key)
    return "".join(add_letters(c, key[i % n]) for i, c in enumerate(message))


def decrypt(cipher_text: str, key: str) -> str:
    """
    Vigenere-decrypt: out[i] = cipher_text[i] - key[i mod len(key)].

    Non-letter symbols in either input come out as UNKNOWN_LETTER, so a
    wrong or malformed key shows up as '?' runs rather than an exception.

    Raises:
        ValueError: If the key is empty.
    """
    _check_key(key)
    n = len(key)
    return "".join(sub_letters(c, key[i % n]) for i, c in enumerate(cipher_text))


# ============================================================================
# 4. CIPHERTEXT STORE
# ============================================================================

class CipherText:
    """
    Normalized cipher text plus the sampling primitives the attack needs.

    The stored text is only ever replaced as a whole (load/clear). Every
    other method reads it.
    """

    def __init__(self, raw_text: str = "") -> None:
        self._text = ""
        self._symbols = np.array([], dtype="<U1")
        if raw_text:
            self.load(raw_text)

    def load(self, raw_text: str) -> None:
        """Replace the stored cipher text with normalize_text(raw_text)."""
        text = normalize_text(raw_text)
        stray = sorted({c for c in text if not is_letter(c)})
        if stray:
            # Stray symbols still take part in count_matches but are skipped
            # by frequencies, so key-length scores include them.
            warnings.warn(f"Cipher text contains non-letter symbols: {''.join(stray)}")
        self._text = text
        self._symbols = np.array(list(text), dtype="<U1")

    def clear(self) -> None:
        self._text = ""
        self._symbols = np.array([], dtype="<U1")

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def length(self) -> int:
        return len(self._text)

    def __str__(self) -> str:
        return wrap_text(self._text)

    def __repr__(self) -> str:
        return f"CipherText({self._text!r})"

    def letter_counts(self, start: int, skip: int) -> np.ndarray:
        """
        Integer letter counts of every skip-th symbol, beginning at start.
        Non-letters are skipped.

        Raises:
            ValueError: If skip < 1 or start < 0.
        """
        if skip < 1:
            raise ValueError(f"skip must be >= 1, got {skip}")
        if start < 0:
            raise ValueError(f"start must be >= 0, got {start}")
        counts = np.zeros(NUM_LETTERS, dtype=np.int64)
        for c in self._text[start::skip]:
            index = index_of(c)
            if index is not None:
                counts[index] += 1
        return counts

    def frequencies(self, start: int, skip: int) -> np.ndarray:
        """
        Letter frequencies of every skip-th symbol, beginning at start.

        Counts are divided by the length of the WHOLE cipher text rather than
        by the number of sampled symbols, so at a fixed key length every
        column is on the same scale as the others.

        Args:
            start: First position sampled.
            skip: Step between sampled positions (the key length).

        Returns:
            Length-26 float array indexed A..Z. All zeros for empty text.

        Raises:
            ValueError: If skip < 1 or start < 0.
        """
        counts = self.letter_counts(start, skip).astype(float)
        n = len(self._text)
        if n == 0:
            return counts
        return counts / n

    def count_matches(self, displacement: int) -> int:
        """
        Coincidences between the text and itself shifted by displacement:
        the number of i in [0, N - displacement) with text[i] == text[i + d].

        Symbols are compared literally, letters or not.

        Raises:
            ValueError: If displacement < 1.
        """
        if displacement < 1:
            raise ValueError(f"displacement must be >= 1, got {displacement}")
        if displacement >= len(self._text):
            return 0
        symbols = self._symbols
        return int(np.count_nonzero(symbols[:-displacement] == symbols[displacement:]))

    def decrypt(self, key: str) -> str:
        return decrypt(self._text, key)

    def predict_key_lengths(self) -> list[KeyLengthPrediction]:
        return predict_key_lengths(self)

    def predict_key(self, key_length: int) -> KeyPrediction:
        return predict_key(self, key_length)


# ============================================================================
# 5. CRYPTANALYSIS — key length and key prediction
# ============================================================================

class KeyLengthPrediction(NamedTuple):
    length: int
    score: int


class KeyPrediction(NamedTuple):
    key: str
    score: float


def predict_key_lengths(cipher: CipherText) -> list[KeyLengthPrediction]:
    """
    Score every displacement 1..N-1 by its coincidence count.

    Returns the candidates sorted ascending by score, so the most plausible
    key lengths (and their multiples) are at the END of the list. The sort is
    stable: equal scores stay in ascending length order.
    """
    predictions = [
        KeyLengthPrediction(length=d, score=cipher.count_matches(d))
        for d in range(1, len(cipher))
    ]
    return sorted(predictions, key=lambda p: p.score)


def shift_scores(freq: np.ndarray) -> np.ndarray:
    """
    Dot products of the observed column frequencies with the English
    reference rotated right by each shift 0..25.

    scores[s] = sum_i REF[(i - s) mod 26] * freq[i]
    """
    return np.array([
        float(np.dot(np.roll(REFERENCE_FREQUENCIES, s), freq))
        for s in range(NUM_LETTERS)
    ])


def shift_scores_milli(counts: np.ndarray) -> np.ndarray:
    """
    Exact integer form of shift_scores: letter counts against the
    reference in thousandths. scores[s] / (1000 * N) == shift_scores(...)[s].
    """
    return np.array([
        int(np.dot(np.roll(REFERENCE_MILLI, s), counts))
        for s in range(NUM_LETTERS)
    ], dtype=np.int64)


def predict_key(cipher: CipherText, key_length: int) -> KeyPrediction:
    """
    Most likely key of the given length.

    For each key position k, the column k, k+L, k+2L, ... is compared with
    every rotation of the English profile; the rotation with the largest dot
    product gives the key letter. The score is the sum of the winning dot
    products over all positions.

    Ties go to the smallest shift: only a strictly larger dot product
    replaces the running best, which starts at 0 (all inputs are
    non-negative, so an all-zero column yields 'A'). Shifts are compared
    in integer thousandths so equal dot products really compare equal.

    Raises:
        ValueError: If key_length is outside [1, len(cipher)].
    """
    n = len(cipher)
    if not 1 <= key_length <= n:
        raise ValueError(f"key_length must be in [1, {n}], got {key_length}")

    key: list[str] = []
    total = 0.0
    for k in range(key_length):
        scores = shift_scores_milli(cipher.letter_counts(k, key_length))
        best_dot = 0
        best_shift = 0
        for shift, dot in enumerate(scores):
            if dot > best_dot:
                best_dot = int(dot)
                best_shift = shift
        key.append(letter_of(best_shift))
        total += best_dot / (1000 * n)

    return KeyPrediction(key="".join(key), score=total)


# ============================================================================
# 6. STATS — aids for judging a candidate decryption
# ============================================================================

def index_of_coincidence(text: str) -> float:
    """
    Index of coincidence over the letters of text.

    English: ~0.066. Random (uniform 26): ~0.038.
    """
    letters = [c for c in text.upper() if c in ALPHABET]
    n = len(letters)
    if n < 2:
        return 0.0
    counts = Counter(letters)
    return sum(c * (c - 1) for c in counts.values()) / (n * (n - 1))


def letter_frequency_test(text: str) -> dict:
    """
    Compare the letter distribution of text against English.

    Returns dict with:
        observed_freq: observed letter frequency distribution
        chi2: chi-squared against English frequencies
        p_value: p-value (25 dof)
        kl_divergence: KL divergence from English
        ic: index of coincidence
        n: number of letters counted
    """
    from scipy import stats as sp_stats

    letters = [c for c in text.upper() if c in ALPHABET]
    total = len(letters)
    if total == 0:
        return {
            "observed_freq": {}, "chi2": float("inf"), "p_value": 0.0,
            "kl_divergence": float("inf"), "ic": 0.0, "n": 0,
        }

    counts = Counter(letters)
    obs_freq = {c: counts.get(c, 0) / total for c in ALPHABET}

    obs_arr = np.array([counts.get(c, 0) for c in ALPHABET], dtype=float)
    exp_arr = REFERENCE_FREQUENCIES * total
    # No zero expected cells, and totals must agree for chisquare
    exp_arr = np.maximum(exp_arr, 0.5)
    exp_arr = exp_arr * (obs_arr.sum() / exp_arr.sum())
    chi2, p_value = sp_stats.chisquare(obs_arr, exp_arr)

    # D_KL(observed || english)
    kl = 0.0
    for c in ALPHABET:
        p = obs_freq[c]
        if p > 0:
            kl += p * math.log2(p / ENGLISH_FREQ[c])

    return {
        "observed_freq": obs_freq,
        "chi2": float(chi2),
        "p_value": float(p_value),
        "kl_divergence": kl,
        "ic": index_of_coincidence(text),
        "n": total,
    }


# ============================================================================
# 7. OUTPUT UTILS — formatting, wrapping, plots
# ============================================================================

def format_key_length_prediction(p: KeyLengthPrediction) -> str:
    return f"length {p.length:3d} | score {p.score:2d}"


def format_key_prediction(p: KeyPrediction) -> str:
    return f"key {p.key} | score {p.score:.5f}"


def wrap_text(text: str, width: int = DISPLAY_COLUMNS) -> str:
    """Break text into fixed-width lines, each ending in a newline."""
    return "".join(text[i : i + width] + "\n" for i in range(0, len(text), width))


def format_frequency_report(stats: dict) -> str:
    """Format a letter_frequency_test() result as a short table."""
    lines = [
        f"Letters counted:     {stats['n']}",
        f"Index of coincidence {stats['ic']:.4f}  (English ~0.066, random ~0.038)",
        f"Chi2 vs English:     {stats['chi2']:.1f}  (p={stats['p_value']:.4f})",
        f"KL divergence:       {stats['kl_divergence']:.3f}",
    ]
    return "\n".join(lines)


def plot_key_length_scores(
    predictions: Sequence[KeyLengthPrediction],
    save_path: str | Path | None = None,
) -> None:
    """
    Bar chart of coincidence count by displacement.

    Requires matplotlib (optional dependency).
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        warnings.warn("matplotlib not available; skipping plot")
        return

    ordered = sorted(predictions, key=lambda p: p.length)
    lengths = [p.length for p in ordered]
    scores = [p.score for p in ordered]

    fig, ax = plt.subplots(figsize=(12, 4))
    ax.bar(lengths, scores, width=0.8)
    ax.set_xlabel("Displacement (candidate key length)")
    ax.set_ylabel("Coincidences")
    ax.set_title("Coincidence counts by displacement")

    plt.tight_layout()
    if save_path:
        plt.savefig(str(save_path), dpi=150, bbox_inches="tight")
        print(f"Saved: {save_path}")
    else:
        plt.show()
    plt.close(fig)


# ============================================================================
# SELF-TEST — Run when executed directly
# ============================================================================

_SAMPLE_PLAINTEXT = (
    "thereisnothingeitherforgoodorillbutthinkingmakesitsoforthegreater"
    "partofmankindtheprincipalsourceofunhappinessliesintheirownmindsand"
    "theirjudgementsofthingsratherthaninthethingsthemselveswhichthey"
    "fearorwhichtheydesireandthisisastrueofnationsasofmen"
)


def _self_test() -> None:
    """Known vectors, then a full attack on an encrypted sample."""
    print("=== vigenere.py self-test ===\n")

    # 1. Alphabet arithmetic
    assert normalize_index(27) == 1 and normalize_index(-2) == 24
    assert sub_letters("A", "B") == "Z"
    assert add_letters("A", "?") == UNKNOWN_LETTER
    print("Alphabet arithmetic: PASS")

    # 2. Ten A's
    aaa = CipherText("AAAAA AAAAA")
    assert len(aaa) == 10
    for d in range(1, 10):
        assert aaa.count_matches(d) == 10 - d
    assert aaa.decrypt("B") == "Z" * 10
    print("Ten-A vectors: PASS\n")

    # 3. Full attack
    key = "HAMLET"
    cipher = CipherText(encrypt(_SAMPLE_PLAINTEXT, key))
    print(f"Sample: {len(cipher)} letters, key '{key}'")
    print("Top displacements:")
    for p in cipher.predict_key_lengths()[-6:]:
        print(f"  {format_key_length_prediction(p)}")
    prediction = cipher.predict_key(len(key))
    print(f"Predicted: {format_key_prediction(prediction)}")
    decoded = cipher.decrypt(prediction.key)
    print(f"Decrypt preview: {decoded[:60]}")
    print()
    print(format_frequency_report(letter_frequency_test(decoded)))

    print("\n=== Self-test complete ===")


if __name__ == "__main__":
    _self_test()
