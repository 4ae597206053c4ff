import random

import pytest

import huffman as huff


def build_input():
    return "a" * 5 + "b" * 9 + "c" * 12 + "d" * 13 + "e" * 16 + "f" * 45


def assert_freq_sums(node):
    if node.is_leaf:
        assert node.freq >= 1
        return node.freq
    total = assert_freq_sums(node.left) + assert_freq_sums(node.right)
    assert node.freq == total
    return total


def assert_prefix_free(codes):
    values = list(codes.values())
    for i, a in enumerate(values):
        for j, b in enumerate(values):
            if i != j:
                assert not b.startswith(a), f"{a!r} is a prefix of {b!r}"


SAMPLE_TEXTS = [
    "a",
    "ab",
    "aaaa",
    "this should work",
    "encode this huffman string",
    "abracadabra",
    build_input(),
    "héllo wörld ✓✓✓",
    "\n\t \x00zz",
]


# Frequency counting

def test_frequencies_count_each_symbol():
    assert huff.count_frequencies("abracadabra") == {"a": 5, "b": 2, "r": 2, "c": 1, "d": 1}


def test_frequencies_of_empty_input():
    assert huff.count_frequencies("") == {}
    assert huff.count_frequencies(b"") == {}


def test_frequencies_of_bytes_use_integer_symbols():
    assert huff.count_frequencies(b"AAB") == {65: 2, 66: 1}


@pytest.mark.parametrize("text", SAMPLE_TEXTS)
def test_frequencies_sum_to_input_length(text):
    assert sum(huff.count_frequencies(text).values()) == len(text)


# Tree building

def test_tree_shape_for_classic_alphabet():
    root = huff.build_huffman_tree(huff.count_frequencies(build_input()))

    assert root.freq == 100
    assert root.left.symbol == "f" and root.left.freq == 45

    right = root.right
    assert right.freq == 55
    assert right.left.freq == 25
    assert (right.left.left.symbol, right.left.right.symbol) == ("c", "d")
    assert right.right.freq == 30
    assert right.right.left.freq == 14
    assert (right.right.left.left.symbol, right.right.left.right.symbol) == ("a", "b")
    assert right.right.right.symbol == "e"


@pytest.mark.parametrize("text", SAMPLE_TEXTS)
def test_internal_freq_is_sum_of_children(text):
    root = huff.build_huffman_tree(huff.count_frequencies(text))
    assert assert_freq_sums(root) == len(text)


def test_single_symbol_tree_is_a_leaf():
    root = huff.build_huffman_tree({"a": 4})
    assert root.is_leaf
    assert root.freq == 4
    assert root.left is None and root.right is None


def test_empty_frequency_map_raises():
    with pytest.raises(huff.EmptyInput):
        huff.build_huffman_tree({})


def test_empty_input_is_a_value_error():
    with pytest.raises(ValueError):
        huff.build_huffman_tree({})


def test_non_positive_frequency_rejected():
    with pytest.raises(ValueError):
        huff.build_huffman_tree({"a": 3, "b": 0})


def test_ties_resolve_by_symbol_not_insertion_order():
    forward = huff.generate_huffman_codes(huff.build_huffman_tree({"a": 1, "b": 1, "c": 1}))
    backward = huff.generate_huffman_codes(huff.build_huffman_tree({"c": 1, "b": 1, "a": 1}))
    assert forward == backward == {"c": "0", "a": "10", "b": "11"}


def test_leaf_wins_tie_against_merged_node():
    # a+b merge to 2, which ties with leaf c
    root = huff.build_huffman_tree({"a": 1, "b": 1, "c": 2})
    assert root.left.symbol == "c"
    assert not root.right.is_leaf


# Code table

def test_code_table_for_classic_alphabet():
    root = huff.build_huffman_tree(huff.count_frequencies(build_input()))
    assert huff.generate_huffman_codes(root) == {
        "f": "0",
        "c": "100",
        "d": "101",
        "a": "1100",
        "b": "1101",
        "e": "111",
    }


def test_code_generation_consumes_tree():
    root = huff.build_huffman_tree(huff.count_frequencies("abracadabra"))
    huff.generate_huffman_codes(root)
    assert root.left is None and root.right is None


def test_code_generation_rejects_consumed_tree():
    root = huff.build_huffman_tree(huff.count_frequencies("abracadabra"))
    huff.generate_huffman_codes(root)
    with pytest.raises(ValueError, match="already consumed"):
        huff.generate_huffman_codes(root)


def test_single_symbol_gets_one_bit():
    assert huff.generate_huffman_codes(huff.build_huffman_tree({"z": 7})) == {"z": "0"}


@pytest.mark.parametrize("text", SAMPLE_TEXTS)
def test_code_table_is_prefix_free_and_complete(text):
    code = huff.encode(text)
    assert set(code.code_table) == set(text)
    assert all(code.code_table.values())
    assert_prefix_free(code.code_table)


@pytest.mark.parametrize("text", SAMPLE_TEXTS + ["aaabbc", "mississippi river"])
def test_more_frequent_symbols_never_get_longer_codes(text):
    freqs = huff.count_frequencies(text)
    codes = huff.encode(text).code_table
    for s in freqs:
        for t in freqs:
            if freqs[s] > freqs[t]:
                assert len(codes[s]) <= len(codes[t])

    top = max(freqs.values())
    shortest_top = min(len(codes[s]) for s in freqs if freqs[s] == top)
    average = sum(len(codes[s]) * f for s, f in freqs.items()) / len(text)
    assert shortest_top <= average


# Encoding

def test_encode_single_symbol_text():
    code = huff.encode("aaaa")
    assert dict(code.code_table) == {"a": "0"}
    assert code.compressed == "0000"


def test_encode_empty_text_raises():
    with pytest.raises(huff.EmptyInput):
        huff.encode("")


@pytest.mark.parametrize("text", SAMPLE_TEXTS)
def test_encoded_length_is_sum_of_code_lengths(text):
    code = huff.encode(text)
    assert len(code.compressed) == sum(len(code.code_table[ch]) for ch in text)
    assert set(code.compressed) <= {"0", "1"}


def test_encode_follows_input_order():
    table = {"c": "0", "a": "10", "b": "11"}
    assert huff.huffman_encode("abcab", table) == "10" + "11" + "0" + "10" + "11"


def test_missing_code_raises():
    with pytest.raises(huff.MissingCodeForSymbol) as excinfo:
        huff.huffman_encode("abx", {"a": "0", "b": "1"})
    assert excinfo.value.symbol == "x"
    assert isinstance(excinfo.value, KeyError)


def test_huffman_code_is_frozen():
    code = huff.encode("abc")
    with pytest.raises(AttributeError):
        code.compressed = ""


def test_encoded_code_table_is_read_only():
    code = huff.encode("abc")
    with pytest.raises(TypeError):
        code.code_table["a"] = "111"
    with pytest.raises(TypeError):
        del code.code_table["a"]
    assert huff.decode(code) == "abc"


# Decoding

@pytest.mark.parametrize("text", SAMPLE_TEXTS)
def test_round_trip(text):
    code = huff.encode(text)
    assert huff.decode(code.code_table, code.compressed) == text
    assert huff.decode(code) == text


def test_round_trip_bytes():
    data = bytes(range(256)) * 3 + b"\x00" * 50
    code = huff.encode(data)
    out = huff.decode(code)
    assert isinstance(out, bytes)
    assert out == data


def test_round_trip_random_texts():
    rng = random.Random(2024)
    for _ in range(50):
        alphabet = rng.sample("abcdefghijklmnop", rng.randint(1, 16))
        text = "".join(rng.choice(alphabet) for _ in range(rng.randint(1, 300)))
        assert huff.decode(huff.encode(text)) == text


def test_decode_accepts_integer_bits():
    table = {"c": "0", "a": "10", "b": "11"}
    assert huff.decode(table, [1, 0, 0, 1, 1]) == "acb"
    assert huff.decode(table, [True, False]) == "a"


def test_decode_empty_bits():
    assert huff.decode({"a": "0"}, "") == ""


def test_decode_trailing_bits_raise():
    with pytest.raises(huff.MalformedEncodedInput) as excinfo:
        huff.decode({"c": "0", "a": "10", "b": "11"}, "0101")
    assert excinfo.value.position == 4


def test_decode_unknown_path_raises():
    with pytest.raises(huff.MalformedEncodedInput) as excinfo:
        huff.decode({"a": "0"}, "01")
    assert excinfo.value.position == 1


def test_decode_invalid_bit_raises():
    with pytest.raises(huff.MalformedEncodedInput) as excinfo:
        huff.decode({"a": "0", "b": "1"}, "0120")
    assert excinfo.value.position == 2


def test_decode_rejects_table_that_is_not_prefix_free():
    with pytest.raises(ValueError):
        huff.decode({"a": "0", "b": "01"}, "0")
    with pytest.raises(ValueError):
        huff.decode({"a": "01", "b": "0"}, "0")


def test_decode_rejects_empty_code():
    with pytest.raises(ValueError):
        huff.decode({"a": ""}, "")


def test_decode_rejects_non_binary_code():
    with pytest.raises(ValueError, match="not binary"):
        huff.decode({"a": "0", "b": "2"}, "0")


def test_decode_argument_errors():
    code = huff.encode("abc")
    with pytest.raises(TypeError):
        huff.decode(code, code.compressed)
    with pytest.raises(TypeError):
        huff.decode(code.code_table)
