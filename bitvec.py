import operator
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence, Tuple


def bytes_in_bits(nbits: int) -> int:
    """Return the number of bytes needed to hold ``nbits`` bits.

    :param nbits: Bit count.
    :type nbits: int
    :returns: ``ceil(nbits / 8)``.
    :rtype: int
    :raises ValueError: If ``nbits`` is negative.
    """
    if nbits < 0:
        raise ValueError(f"Bit count must be non-negative, got {nbits}")
    return (nbits + 7) // 8


def byte_from_bool(bit: Any) -> int:
    """Return ``0xFF`` for a truthy ``bit`` and ``0x00`` otherwise."""
    return 0xFF if bit else 0x00


class BitVec:
    """Growable bit vector backed by a ``bytearray`` with LSB-0 numbering.

    Bit ``i`` lives in byte ``i // 8`` at offset ``i % 8`` counted from the
    least-significant bit. The storage always holds exactly
    ``ceil(len / 8)`` bytes and the unused high bits of the last byte are
    always 0, so the raw bytes can be handed to I/O code as they are.

    :ivar _nbits: Number of bits in the vector.
    :type _nbits: int
    :ivar _bytes: Backing byte storage.
    :type _bytes: bytearray
    :ivar _cap: Reserved byte capacity (always ``>= len(_bytes)``).
    :type _cap: int
    """

    def __init__(self):
        """Create an empty bit vector. Nothing is reserved.

        :returns: None
        :rtype: None
        """
        self._nbits = 0
        self._bytes = bytearray()
        self._cap = 0

    # ------------------------------------------------------------------
    # Constructors

    @classmethod
    def with_capacity(cls, capacity: int) -> "BitVec":
        """Create an empty bit vector able to hold ``capacity`` bits.

        :param capacity: Number of bits to reserve room for.
        :type capacity: int
        :returns: Empty vector with ``ceil(capacity / 8)`` reserved bytes.
        :rtype: BitVec
        """
        vec = cls()
        vec._cap = bytes_in_bits(capacity)
        return vec

    @classmethod
    def from_bytes(cls, data: bytes) -> "BitVec":
        """Create a bit vector holding every bit of ``data``.

        The resulting length is ``len(data) * 8``; there is no partial byte,
        so no masking is needed.

        :param data: Source bytes (any bytes-like object). It is copied.
        :type data: bytes
        :returns: New bit vector.
        :rtype: BitVec
        """
        vec = cls()
        vec._bytes = bytearray(data)
        vec._nbits = len(vec._bytes) * 8
        vec._cap = len(vec._bytes)
        return vec

    @classmethod
    def from_bools(cls, bools: Sequence[Any]) -> "BitVec":
        """Create a bit vector by pushing each value of ``bools`` in order.

        :param bools: Sized sequence of truthy/falsy values.
        :type bools: Sequence[Any]
        :returns: New bit vector of length ``len(bools)``.
        :rtype: BitVec
        """
        vec = cls.with_capacity(len(bools))
        for bit in bools:
            vec.push(bit)
        return vec

    @classmethod
    def from_iter(cls, values: Iterable[Any]) -> "BitVec":
        """Create a bit vector from any iterable of truthy/falsy values.

        :param values: Values to push; consumed once.
        :type values: Iterable[Any]
        :returns: New bit vector.
        :rtype: BitVec
        """
        vec = cls.with_capacity(operator.length_hint(values))
        vec.extend(values)
        return vec

    @classmethod
    def from_elem(cls, length: int, value: Any) -> "BitVec":
        """Create a bit vector of ``length`` copies of ``value``.

        :param length: Number of bits.
        :type length: int
        :param value: Bit value to repeat.
        :type value: Any
        :returns: New bit vector.
        :rtype: BitVec
        """
        vec = cls()
        vec._bytes = bytearray([byte_from_bool(value)]) * bytes_in_bits(length)
        vec._nbits = length
        vec._cap = len(vec._bytes)
        vec._set_unused_zero()
        return vec

    # ------------------------------------------------------------------
    # Byte views

    def as_bytes(self) -> memoryview:
        """Return a read-only, zero-copy view of the backing bytes.

        The unused bits of the last byte are guaranteed to be 0. While the
        view is alive the storage cannot be resized: ``push``, ``pop``,
        ``truncate`` and friends raise ``BufferError`` until the view is
        released (``view.release()`` or a ``with`` block).

        :returns: Read-only view of ``ceil(len / 8)`` bytes.
        :rtype: memoryview
        """
        return memoryview(self._bytes).toreadonly()

    @contextmanager
    def bytes_mut(self) -> Iterator[memoryview]:
        """Context manager granting writable access to the backing bytes.

        The yielded view can be written but not resized. When the block
        exits, normally or by an exception, the view is released and the
        unused bits of the last byte are cleared again.

        :returns: Context manager yielding a writable ``memoryview``.
        :rtype: Iterator[memoryview]
        """
        view = memoryview(self._bytes)
        try:
            yield view
        finally:
            view.release()
            self._set_unused_zero()

    def with_bytes_mut(self, f: Callable[[memoryview], Any]) -> Any:
        """Call ``f`` on a writable view of the bytes and restore padding.

        :param f: Callable receiving a writable ``memoryview``.
        :type f: Callable[[memoryview], Any]
        :returns: Whatever ``f`` returns.
        :rtype: Any
        """
        with self.bytes_mut() as view:
            return f(view)

    def into_bytes(self) -> bytearray:
        """Move the backing bytes out of the vector.

        The returned buffer has ``ceil(len / 8)`` bytes with zero padding.
        The bit length is not carried over and the vector is left empty.

        :returns: The former backing storage.
        :rtype: bytearray
        """
        data = self._bytes
        self._bytes = bytearray()
        self._nbits = 0
        self._cap = 0
        return data

    def __bytes__(self) -> bytes:
        return bytes(self._bytes)

    # ------------------------------------------------------------------
    # Getters/setters

    def __len__(self) -> int:
        return self._nbits

    def is_empty(self) -> bool:
        """Return ``True`` if the vector holds no bits."""
        return self._nbits == 0

    def _validate_index(self, index: int) -> None:
        if not 0 <= index < self._nbits:
            raise IndexError(f"Index {index} out of bounds [0, {self._nbits})")

    def get(self, index: int) -> Optional[bool]:
        """Return the bit at ``index`` or ``None`` if it is out of range.

        :param index: Bit index.
        :type index: int
        :returns: The bit value, or ``None`` when ``index >= len``.
        :rtype: Optional[bool]
        """
        if 0 <= index < self._nbits:
            return self._read_bit(index)
        return None

    def set(self, index: int, value: Any) -> None:
        """Set the bit at ``index`` to ``value``.

        :param index: Bit index.
        :type index: int
        :param value: New bit value (truthiness is used).
        :type value: Any
        :returns: None
        :rtype: None
        :raises IndexError: If ``index`` is out of range.
        """
        self._validate_index(index)
        self._write_bit(index, value)

    def swap(self, i: int, j: int) -> None:
        """Exchange the bits at ``i`` and ``j``.

        :param i: First bit index.
        :type i: int
        :param j: Second bit index.
        :type j: int
        :returns: None
        :rtype: None
        :raises IndexError: If either index is out of range. Nothing is
            modified in that case.
        """
        self._validate_index(i)
        self._validate_index(j)
        val_i = self._read_bit(i)
        val_j = self._read_bit(j)
        self._write_bit(i, val_j)
        self._write_bit(j, val_i)

    def get_unchecked(self, index: int) -> bool:
        """Read the bit at ``index`` without bounds validation.

        The caller must guarantee ``0 <= index < len``. The precondition is
        only asserted, so it disappears under ``python -O``; an index past
        the storage then raises whatever ``bytearray`` raises, and an index
        inside the padding reads a 0.

        :param index: Bit index.
        :type index: int
        :returns: The bit value.
        :rtype: bool
        """
        assert 0 <= index < self._nbits, f"unchecked read at {index} >= {self._nbits}"
        return self._read_bit(index)

    def set_unchecked(self, index: int, value: Any) -> None:
        """Write the bit at ``index`` without bounds validation.

        The caller must guarantee ``0 <= index < len``. Writing a 1 into the
        padding region breaks the zero-padding invariant.

        :param index: Bit index.
        :type index: int
        :param value: New bit value.
        :type value: Any
        :returns: None
        :rtype: None
        """
        assert 0 <= index < self._nbits, f"unchecked write at {index} >= {self._nbits}"
        self._write_bit(index, value)

    def _read_bit(self, index: int) -> bool:
        return (self._bytes[index // 8] >> (index % 8)) & 1 == 1

    def _write_bit(self, index: int, value: Any) -> None:
        pattern = 1 << (index % 8)
        if value:
            self._bytes[index // 8] |= pattern
        else:
            self._bytes[index // 8] &= ~pattern & 0xFF

    def __getitem__(self, index: int) -> bool:
        """Return the bit at ``index``.

        :param index: Non-negative bit index.
        :type index: int
        :returns: ``True`` or ``False``.
        :rtype: bool
        :raises IndexError: If ``index`` is out of range.
        :raises TypeError: If ``index`` is not an integer (slices included).
        """
        if isinstance(index, slice):
            raise TypeError("BitVec indices must be integers, not slice")
        index = operator.index(index)
        self._validate_index(index)
        return self._read_bit(index)

    def __setitem__(self, index: int, value: Any) -> None:
        if isinstance(index, slice):
            raise TypeError("BitVec indices must be integers, not slice")
        self.set(operator.index(index), value)

    # ------------------------------------------------------------------
    # Adding/removing bits

    def push(self, value: Any) -> None:
        """Append one bit to the end of the vector.

        :param value: Bit value (truthiness is used).
        :type value: Any
        :returns: None
        :rtype: None
        """
        if self._nbits % 8 == 0:
            self._bytes.append(1 if value else 0)
            self._grow_capacity(len(self._bytes))
        else:
            self._write_bit(self._nbits, value)
        self._nbits += 1

    def pop(self) -> Optional[bool]:
        """Remove and return the last bit.

        The vacated bit is cleared, and the last byte is dropped once it no
        longer holds any bit.

        :returns: The removed bit, or ``None`` if the vector is empty.
        :rtype: Optional[bool]
        """
        if self._nbits == 0:
            return None
        nbits = self._nbits - 1
        value = self._read_bit(nbits)
        if nbits % 8 == 0:
            del self._bytes[-1]
        else:
            self._write_bit(nbits, False)
        self._nbits = nbits
        return value

    def extend(self, values: Iterable[Any]) -> None:
        """Push every value of ``values`` in order.

        Iterating this vector itself (directly or through one of its
        iterators) appends the bits as they were before the call.

        :param values: Iterable of truthy/falsy values.
        :type values: Iterable[Any]
        :returns: None
        :rtype: None
        """
        if values is self or (
            isinstance(values, _BitCursor) and values._vec is self
        ):
            values = list(values)
        self.reserve(operator.length_hint(values))
        for value in values:
            self.push(value)

    def clear(self) -> None:
        """Remove all bits. The reserved capacity is kept."""
        self._bytes.clear()
        self._nbits = 0

    def truncate(self, length: int) -> None:
        """Shorten the vector to ``length`` bits.

        Has no effect if ``length`` is not less than the current length.

        :param length: New length in bits.
        :type length: int
        :returns: None
        :rtype: None
        """
        if length < self._nbits:
            del self._bytes[bytes_in_bits(length):]
            self._nbits = length
            self._set_unused_zero()

    def resize(self, length: int, value: Any) -> None:
        """Grow with copies of ``value`` or shrink to ``length`` bits.

        ``value`` is ignored when shrinking.

        :param length: New length in bits.
        :type length: int
        :param value: Fill value for new bits.
        :type value: Any
        :returns: None
        :rtype: None
        """
        if length > self._nbits:
            additional = length - self._nbits
            self.reserve(additional)
            for _ in range(additional):
                self.push(value)
        else:
            self.truncate(length)

    # ------------------------------------------------------------------
    # Capacity

    def capacity(self) -> int:
        """Return the bookkept capacity in bits (see :meth:`reserve`)."""
        return self._cap * 8

    def reserve(self, additional: int) -> None:
        """Record room for at least ``additional`` more bits.

        ``bytearray`` has no reservation API, so no memory is allocated
        here; only the number reported by :meth:`capacity` grows, with the
        same amortized doubling a real reservation would use. The buffer
        itself over-allocates on append.

        :param additional: Number of extra bits.
        :type additional: int
        :returns: None
        :rtype: None
        """
        self._grow_capacity(len(self._bytes) + bytes_in_bits(additional))

    def _grow_capacity(self, required: int) -> None:
        # amortized doubling
        if required > self._cap:
            self._cap = max(self._cap * 2, required)

    # ------------------------------------------------------------------
    # Helpers

    def _set_unused_zero(self) -> None:
        """Clear the bits past the length in the last byte."""
        tail = self._nbits % 8
        if tail == 0:
            return
        self._bytes[-1] &= (1 << tail) - 1

    def copy(self) -> "BitVec":
        """Return an independent copy of the vector."""
        vec = BitVec()
        vec._bytes = bytearray(self._bytes)
        vec._nbits = self._nbits
        vec._cap = len(vec._bytes)
        return vec

    __copy__ = copy

    def __deepcopy__(self, memo) -> "BitVec":
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitVec):
            return NotImplemented
        return self._nbits == other._nbits and self._bytes == other._bytes

    __hash__ = None

    # ------------------------------------------------------------------
    # Iteration

    def iter(self) -> "BitIter":
        """Return a borrowing iterator over the bits, low index first."""
        return BitIter(self)

    def __iter__(self) -> "BitIter":
        return BitIter(self)

    def into_iter(self) -> "IntoBitIter":
        """Move the bits into a consuming iterator, leaving this vector empty.

        :returns: Iterator owning the former contents.
        :rtype: IntoBitIter
        """
        owned = BitVec()
        owned._nbits = self._nbits
        owned._cap = self._cap
        owned._bytes = self.into_bytes()
        return IntoBitIter(owned)

    # ------------------------------------------------------------------
    # Formatting

    def __str__(self) -> str:
        chars = "".join("1" if bit else "." for bit in self)
        return " ".join(chars[i:i + 8] for i in range(0, len(chars), 8))

    def __repr__(self) -> str:
        return f"BitVec{{{self._nbits}: {self}}}"


class _BitCursor:
    """Forward cursor over a :class:`BitVec`.

    The vector supports O(1) random access, so the remaining count is exact
    and skipping ahead does not read the skipped bits.

    :ivar _vec: Vector being iterated.
    :type _vec: BitVec
    :ivar _index: Index of the next bit to yield.
    :type _index: int
    """

    def __init__(self, vec: BitVec):
        self._vec = vec
        self._index = 0

    def __iter__(self):
        return self

    def __next__(self) -> bool:
        bit = self._step()
        if bit is None:
            raise StopIteration
        return bit

    def _step(self) -> Optional[bool]:
        if self._index >= len(self._vec):
            return None
        bit = self._vec._read_bit(self._index)
        self._index += 1
        return bit

    def remaining(self) -> int:
        """Return the exact number of bits left."""
        return max(len(self._vec) - self._index, 0)

    def size_hint(self) -> Tuple[int, int]:
        """Return ``(lower, upper)`` bounds on the remaining count.

        Both bounds are exact.

        :rtype: Tuple[int, int]
        """
        remaining = self.remaining()
        return remaining, remaining

    def __length_hint__(self) -> int:
        return self.remaining()

    def count(self) -> int:
        """Exhaust the iterator and return how many bits were left."""
        remaining = self.remaining()
        self._index = max(self._index, len(self._vec))
        return remaining

    def last(self) -> Optional[bool]:
        """Exhaust the iterator and return the final bit.

        :returns: Bit at ``len - 1`` if any bit was left, else ``None``.
        :rtype: Optional[bool]
        """
        nbits = len(self._vec)
        if self._index < nbits:
            self._index = nbits
            return self._vec._read_bit(nbits - 1)
        return None

    def advance(self, count: int) -> Optional[bool]:
        """Skip ``count`` bits and return the next one.

        ``advance(0)`` behaves like ``next`` but returns ``None`` at the end.
        Skipping past the end pins the cursor there.

        :param count: Number of bits to skip.
        :type count: int
        :returns: The bit after the skipped ones, or ``None``.
        :rtype: Optional[bool]
        :raises ValueError: If ``count`` is negative.
        """
        if count < 0:
            raise ValueError(f"Cannot skip a negative number of bits: {count}")
        nbits = len(self._vec)
        if count >= nbits - self._index:
            self._index = nbits
        else:
            self._index += count
        return self._step()


class BitIter(_BitCursor):
    """Borrowing iterator over a :class:`BitVec`.

    Copies share the vector but not the cursor, so a copy replays the
    sequence from the current position independently.
    """

    def copy(self) -> "BitIter":
        """Return an iterator over the same vector at the same position."""
        dup = BitIter(self._vec)
        dup._index = self._index
        return dup

    __copy__ = copy


class IntoBitIter(_BitCursor):
    """Iterator that owns the vector it walks (see :meth:`BitVec.into_iter`)."""
