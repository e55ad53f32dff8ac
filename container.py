import struct
from typing import BinaryIO

from bitvec import BitVec, bytes_in_bits


class BitVecContainer:
    """Binary container persisting a :class:`BitVec` with its bit length.

    Raw bytes alone lose the length of a vector whose size is not a
    multiple of 8, so the container stores the pair ``(nbits, bytes)``.

    Container format (little-endian):
    - Magic: ``b"BVC1"`` (4 bytes)
    - Version: uint8
    - Bit length: uint64
    - Payload: ``ceil(nbits / 8)`` bytes, LSB-0, unused bits of the last
      byte set to 0

    :ivar MAGIC: Container magic number.
    :type MAGIC: bytes
    :ivar VERSION: Format version of the encoder/decoder.
    :type VERSION: int
    :ivar CHUNK_SIZE: Largest single read while loading a payload.
    :type CHUNK_SIZE: int
    """

    MAGIC = b"BVC1"
    VERSION = 1
    HEADER = struct.Struct("<4sBQ")
    CHUNK_SIZE = 64 * 1024

    def pack(self, vec: BitVec) -> bytes:
        """Serialize ``vec`` into container bytes.

        :param vec: Bit vector to serialize.
        :type vec: BitVec
        :returns: Header followed by the payload bytes.
        :rtype: bytes
        """
        return self.HEADER.pack(self.MAGIC, self.VERSION, len(vec)) + bytes(vec)

    def unpack(self, data: bytes) -> BitVec:
        """Deserialize container bytes produced by :meth:`pack`.

        :param data: Complete container bytes.
        :type data: bytes
        :returns: The restored bit vector.
        :rtype: BitVec
        :raises ValueError: If the magic or version is wrong, if bytes follow
            the payload, or if the padding bits are not zero.
        :raises EOFError: If the data ends before the header or payload is
            complete.
        """
        nbits = self._read_header(data[:self.HEADER.size])
        start = self.HEADER.size
        end = start + bytes_in_bits(nbits)
        if len(data) < end:
            raise EOFError("Unexpected end of data")
        if len(data) > end:
            raise ValueError(f"Trailing data after payload: {len(data) - end} bytes")
        return self._decode_payload(nbits, data[start:end])

    def dump(self, vec: BitVec, fp: BinaryIO) -> None:
        """Write ``vec`` to the binary file object ``fp``.

        The payload is written straight from the vector's storage.

        :param vec: Bit vector to write.
        :type vec: BitVec
        :param fp: Writable binary file object.
        :type fp: BinaryIO
        :returns: None
        :rtype: None
        """
        fp.write(self.HEADER.pack(self.MAGIC, self.VERSION, len(vec)))
        with vec.as_bytes() as view:
            fp.write(view)

    def load(self, fp: BinaryIO) -> BitVec:
        """Read one container from the binary file object ``fp``.

        Reading stops right after the payload, so containers can be
        concatenated in one stream.

        :param fp: Readable binary file object.
        :type fp: BinaryIO
        :returns: The restored bit vector.
        :rtype: BitVec
        :raises ValueError: If the header is invalid or the padding bits are
            not zero.
        :raises EOFError: If the stream ends early.
        """
        nbits = self._read_header(fp.read(self.HEADER.size))
        payload = self._read_payload(fp, bytes_in_bits(nbits))
        return self._decode_payload(nbits, payload)

    def _read_payload(self, fp: BinaryIO, nbytes: int) -> bytearray:
        """Read exactly ``nbytes`` from ``fp`` in chunks of ``CHUNK_SIZE``.

        Memory grows with the bytes actually read, not with the length the
        header declares.

        :param fp: Readable binary file object.
        :type fp: BinaryIO
        :param nbytes: Payload size from the header.
        :type nbytes: int
        :returns: The payload bytes.
        :rtype: bytearray
        :raises EOFError: If the stream ends before ``nbytes`` bytes.
        """
        payload = bytearray()
        while len(payload) < nbytes:
            chunk = fp.read(min(self.CHUNK_SIZE, nbytes - len(payload)))
            if not chunk:
                raise EOFError("Unexpected end of data")
            payload += chunk
        return payload

    def _read_header(self, header: bytes) -> int:
        """Validate a container header and return the stored bit length.

        :param header: Exactly ``HEADER.size`` bytes, or fewer if truncated.
        :type header: bytes
        :returns: Bit length of the payload.
        :rtype: int
        :raises EOFError: If ``header`` is short.
        :raises ValueError: On bad magic or unsupported version.
        """
        if len(header) < self.HEADER.size:
            raise EOFError("Unexpected end of data")
        magic, version, nbits = self.HEADER.unpack(header)
        if magic != self.MAGIC:
            raise ValueError("Invalid container format (bad magic)")
        if version != self.VERSION:
            raise ValueError(f"Unsupported version: {version}")
        return nbits

    @staticmethod
    def _decode_payload(nbits: int, payload: bytes) -> BitVec:
        """Build a vector of ``nbits`` bits from a padded payload.

        :param nbits: Declared bit length.
        :type nbits: int
        :param payload: ``ceil(nbits / 8)`` bytes.
        :type payload: bytes
        :returns: The bit vector.
        :rtype: BitVec
        :raises ValueError: If any padding bit is set.
        """
        tail = nbits % 8
        if tail and payload[-1] >> tail:
            raise ValueError("Non-zero padding bits in final byte")
        vec = BitVec.from_bytes(payload)
        vec.truncate(nbits)
        return vec
