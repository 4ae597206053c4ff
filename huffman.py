import heapq
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Union


class HuffmanError(Exception):
    pass

class EmptyInput(HuffmanError, ValueError):
    pass

class MissingCodeForSymbol(HuffmanError, KeyError):
    def __init__(self, symbol):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self):
        return f"no code for symbol {self.symbol!r}"

class MalformedEncodedInput(HuffmanError, ValueError):
    def __init__(self, message, position):
        super().__init__(f"{message} (bit {position})")
        self.position = position


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol, freq, order=0):
        self.symbol = symbol    # char, byte or None for internal nodes
        self.freq = freq
        self.order = order      # tie-break rank among equal frequencies
        self.left = None
        self.right = None

    @property
    def is_leaf(self) -> bool:
        return self.symbol is not None

    def __lt__(self, other):
        return (self.freq, self.order) < (other.freq, other.order) # min-heap on frequency, older nodes first

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode({self.symbol!r}, {self.freq})"
        return f"HuffmanNode(None, {self.freq}, left={self.left!r}, right={self.right!r})"


def count_frequencies(data) -> Dict: # data: str or bytes
    freq_map = {}
    for symbol in data:
        freq_map[symbol] = freq_map.get(symbol, 0) + 1
    return freq_map


def build_huffman_tree(freq_map: Dict) -> HuffmanNode: # freq_map: dict of symbol -> frequency
    """
    Greedy Huffman construction over a min-heap.

    Leaves are ranked by ascending symbol and merged nodes are ranked after
    every leaf in the order they are created, so equal frequencies always
    resolve the same way regardless of how freq_map iterates. The first
    node popped becomes the left child.
    """
    if not freq_map:
        raise EmptyInput("cannot build a Huffman tree from zero symbols")

    priority_queue = []
    for order, symbol in enumerate(sorted(freq_map)):
        freq = freq_map[symbol]
        if freq < 1:
            raise ValueError(f"frequency of {symbol!r} must be positive, got {freq}")
        priority_queue.append(HuffmanNode(symbol, freq, order))
    heapq.heapify(priority_queue)

    next_order = len(priority_queue)
    while len(priority_queue) > 1:
        left = heapq.heappop(priority_queue)
        right = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(None, left.freq + right.freq, next_order)
        merged_node.left = left
        merged_node.right = right
        next_order += 1
        heapq.heappush(priority_queue, merged_node)

    return priority_queue[0] # root of the tree


def generate_huffman_codes(root: HuffmanNode) -> Dict[object, str]:
    """Walk the tree and return symbol -> code. The tree is dismantled on the way."""
    if root.is_leaf:
        return {root.symbol: "0"} # one symbol still needs one bit

    codes = {}
    stack = [(root, "")]
    while stack:
        node, code = stack.pop()
        if node.is_leaf:
            codes[node.symbol] = code
            continue

        left, right = node.left, node.right
        if left is None or right is None:
            raise ValueError("tree already consumed")
        node.left = node.right = None
        stack.append((right, code + "1"))
        stack.append((left, code + "0"))

    return codes


def huffman_encode(data, code_map: Dict[object, str]) -> str:
    parts = []
    for symbol in data:
        try:
            parts.append(code_map[symbol])
        except KeyError:
            raise MissingCodeForSymbol(symbol) from None
    return "".join(parts)


class _TrieNode:
    __slots__ = ("children", "symbol", "is_leaf")

    def __init__(self):
        self.children = [None, None]
        self.symbol = None
        self.is_leaf = False


def _bit_value(bit):
    if bit in ("0", "1"):
        return int(bit)
    if isinstance(bit, (bool, int)) and bit in (0, 1):
        return int(bit)
    return None


def build_decode_tree(code_map: Dict[object, str]) -> _TrieNode:
    """Rebuild a binary trie from a code table, checking that it is prefix-free."""
    root = _TrieNode()
    for symbol, code in code_map.items():
        if not code:
            raise ValueError(f"empty code for symbol {symbol!r}")
        node = root
        for ch in code:
            bit = _bit_value(ch)
            if bit is None:
                raise ValueError(f"code {code!r} for {symbol!r} is not binary")
            if node.is_leaf:
                raise ValueError(f"code table is not prefix-free at {symbol!r}")
            if node.children[bit] is None:
                node.children[bit] = _TrieNode()
            node = node.children[bit]
        if node.is_leaf or node.children != [None, None]:
            raise ValueError(f"code table is not prefix-free at {symbol!r}")
        node.is_leaf = True
        node.symbol = symbol
    return root


def _join_symbols(symbols, code_map):
    if code_map and all(isinstance(s, int) for s in code_map):
        return bytes(symbols)
    return "".join(symbols)


def huffman_decode(bits: Iterable, code_map: Dict[object, str]):
    root = build_decode_tree(code_map)
    decoded = []
    node = root
    consumed = 0
    for position, bit in enumerate(bits):
        value = _bit_value(bit)
        if value is None:
            raise MalformedEncodedInput(f"invalid bit {bit!r}", position)
        node = node.children[value]
        if node is None:
            raise MalformedEncodedInput("bit path matches no code", position)
        if node.is_leaf: # reached a leaf
            decoded.append(node.symbol)
            node = root
        consumed = position + 1

    if node is not root:
        raise MalformedEncodedInput("trailing bits do not form a complete code", consumed)
    return _join_symbols(decoded, code_map)


@dataclass(frozen=True)
class HuffmanCode:
    code_table: Mapping[object, str]
    compressed: str


def encode(text: Union[str, bytes]) -> HuffmanCode:
    freq_map = count_frequencies(text)
    root = build_huffman_tree(freq_map)
    code_table = generate_huffman_codes(root)
    compressed = huffman_encode(text, code_table)
    return HuffmanCode(code_table=MappingProxyType(code_table), compressed=compressed)


def decode(table, encoded=None):
    """decode(table, encoded) or decode(huffman_code)."""
    if isinstance(table, HuffmanCode):
        if encoded is not None:
            raise TypeError("pass either a HuffmanCode or a table and bits, not both")
        table, encoded = table.code_table, table.compressed
    elif encoded is None:
        raise TypeError("decode() needs the encoded bits")
    return huffman_decode(encoded, table)
