"""
---
version: 0.2.0
created: 2026-10-12
updated: 2026-10-19
---

vigenere_cli.py — Interactive assistant for breaking a Vigenere cipher text.

Reads a cipher text file, then loops over a numbered menu:
  1. Display the cipher text
  2. Rank candidate key lengths (displacement coincidences)
  3. Predict the most likely key for a chosen key length
  4. Decrypt with a key
  5. Letter statistics of a decryption (chi2, IC) to judge a key
  6. Exit

Usage:
    python3 vigenere_cli.py CIPHERTEXT_FILE [--width N] [--plot PATH]
"""

from __future__ import annotations

import argparse
import sys
import textwrap
from pathlib import Path
from typing import Callable

from vigenere import (
    DISPLAY_COLUMNS,
    CipherText,
    format_frequency_report, format_key_length_prediction, format_key_prediction,
    letter_frequency_test, plot_key_length_scores, wrap_text,
)

FAIL_EXIT_CODE = 1

MENU_NAME = "Main Menu"
DESCRIPTION_COLUMNS = 70


class Menu:
    """Numbered menu. Item 0 always re-displays the menu itself."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.items: list[tuple[str, str, Callable[[], bool]]] = []

    def add_item(self, name: str, description: str, action: Callable[[], bool]) -> None:
        """Register an action; it returns True when the loop should stop."""
        self.items.append((name, description, action))

    def __str__(self) -> str:
        lines = [f"~~~ {self.name} ~~~"]
        entries = [("Display menu", "Displays this menu.")] + [(n, d) for n, d, _ in self.items]
        for i, (name, description) in enumerate(entries):
            lines.append(f"{i:2d}. {name}")
            lines.append(textwrap.fill(
                description, width=DESCRIPTION_COLUMNS + 4,
                initial_indent="    ", subsequent_indent="    ",
            ))
        return "\n".join(lines) + "\n"

    def query(self) -> Callable[[], bool]:
        """Prompt until a valid item number is entered; return its action."""
        while True:
            raw = input(f"{self.name}: ")
            try:
                choice = int(raw)
            except ValueError:
                choice = -1
            if choice == 0:
                print(self)
            elif 1 <= choice <= len(self.items):
                return self.items[choice - 1][2]
            else:
                print(f"{self}\nInvalid option. Enter the menu item number only.")


# ============================================================================
# MENU ACTIONS
# ============================================================================

def read_key_length(cipher: CipherText) -> int:
    """Prompt until the user enters an integer in [1, len(cipher)]."""
    while True:
        raw = input("Enter key length: ")
        try:
            key_length = int(raw)
        except ValueError:
            key_length = 0
        if 1 <= key_length <= len(cipher):
            return key_length
        print("That is not a valid key length.")


def read_key() -> str:
    """Prompt until a non-empty key is entered."""
    while True:
        key = input("Enter key: ")
        if key:
            return key
        print("The key cannot be empty.")


def show_cipher_text(cipher: CipherText, width: int) -> bool:
    print(wrap_text(cipher.text, width))
    return False


def show_key_lengths(cipher: CipherText) -> bool:
    for p in cipher.predict_key_lengths():
        print(format_key_length_prediction(p))
    return False


def show_key_prediction(cipher: CipherText) -> bool:
    if len(cipher) == 0:
        print("The cipher text is empty.")
        return False
    print(format_key_prediction(cipher.predict_key(read_key_length(cipher))))
    return False


def show_decryption(cipher: CipherText, width: int) -> bool:
    print(wrap_text(cipher.decrypt(read_key()), width))
    return False


def show_letter_stats(cipher: CipherText) -> bool:
    message = cipher.decrypt(read_key())
    print(format_frequency_report(letter_frequency_test(message)))
    return False


def build_menu(cipher: CipherText, width: int = DISPLAY_COLUMNS) -> Menu:
    menu = Menu(MENU_NAME)
    menu.add_item(
        "Display cipher text",
        "Displays the cipher text.",
        lambda: show_cipher_text(cipher, width),
    )
    menu.add_item(
        "Predict key lengths",
        "Ranks possible key lengths by counting coincidences between the cipher"
        " text and itself displaced, as in section 2.3.1 of Introduction to"
        " Cryptography by Trappe and Washington. Best candidates are listed last.",
        lambda: show_key_lengths(cipher),
    )
    menu.add_item(
        "Predict key",
        "Determines the most likely key for a given key length by matching"
        " letter frequencies, as in section 2.3.3 of Introduction to"
        " Cryptography by Trappe and Washington.",
        lambda: show_key_prediction(cipher),
    )
    menu.add_item(
        "Decrypt cipher text",
        "Attempts to decrypt the cipher text using a given key.",
        lambda: show_decryption(cipher, width),
    )
    menu.add_item(
        "Letter statistics",
        "Decrypts with a given key and compares the result's letter"
        " frequencies with English (chi-squared, index of coincidence).",
        lambda: show_letter_stats(cipher),
    )
    menu.add_item("Exit", "Exits the program.", lambda: True)
    return menu


def run_menu(cipher: CipherText, width: int = DISPLAY_COLUMNS) -> None:
    """Serve menu requests until Exit or end of input."""
    menu = build_menu(cipher, width)
    print(menu)
    done = False
    try:
        while not done:
            action = menu.query()
            done = action()
    except EOFError:
        print()


# ============================================================================
# MAIN
# ============================================================================

def load_cipher_text(path: str | Path) -> CipherText:
    """
    Read a whitespace-delimited cipher text file.

    Exits with FAIL_EXIT_CODE if the file cannot be read.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Could not read cipher text file '{path}': {e}", file=sys.stderr)
        sys.exit(FAIL_EXIT_CODE)
    return CipherText(raw)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Vigenere cipher cryptanalysis assistant")
    parser.add_argument("ciphertext", type=str, help="Path to the cipher text file")
    parser.add_argument("--width", type=int, default=DISPLAY_COLUMNS,
                        help="Columns used when displaying cipher text and messages")
    parser.add_argument("--plot", type=str, default=None,
                        help="Save a chart of key-length scores to PATH and exit")
    args = parser.parse_args(argv)

    if args.width < 1:
        parser.error("--width must be a positive integer")

    cipher = load_cipher_text(args.ciphertext)

    if args.plot:
        plot_key_length_scores(cipher.predict_key_lengths(), save_path=args.plot)
        return

    run_menu(cipher, args.width)


if __name__ == "__main__":
    main()
