# chopper/transport/bus.py
"""
Transport Layer (アドレス空間)

VMから見た0x000-0xFFFのアドレス空間を、接続されたデバイスへ振り分けます。
命令によるread/writeは全てアクセスログに残り、Snapshotを通じて観測できます。
ロードや逆アセンブルなど、VMの外からの操作はpeek/loadを使いログに残しません。
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

from chopper.common.errors import OutOfBounds

class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 1バイト分のアクセスを記録します。
@dataclass(frozen=True)
class BusAccess:
    """
    previous_dataは書き込みの場合のみ、上書きされる前の値を持ちます。
    デバッガのステップバックはこの値を書き戻してメモリを復元します。
    """
    address: int
    data: int
    access_type: BusAccessType
    previous_data: Optional[int] = None

# @intent:responsibility バスに接続できる装置のインターフェース。アドレスは装置内のオフセット。
class Device(ABC):
    @abstractmethod
    def read(self, address: int) -> int:
        pass

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        pass

# @intent:responsibility バイト単位で読み書きできるメモリ装置。
class RAM(Device):
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError(f"RAM size must be a positive integer, got {size!r}")
        self._cells = bytearray(size)

    def _check(self, offset: int) -> None:
        if not 0 <= offset < len(self._cells):
            raise OutOfBounds(f"Offset {offset:#06x} outside RAM of {len(self._cells)} bytes")

    def read(self, address: int) -> int:
        self._check(address)
        return self._cells[address]

    def write(self, address: int, data: int) -> None:
        self._check(address)
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value")
        self._cells[address] = data

    def get_size(self) -> int:
        return len(self._cells)

class _Mapping(NamedTuple):
    start: int
    end: int  # inclusive
    device: Device

# @intent:responsibility アドレスからデバイスを解決し、命令によるアクセスを記録します。
class Bus:
    def __init__(self):
        self._mappings: List[_Mapping] = []
        self._activity: List[BusAccess] = []

    # @intent:pre-condition 0 <= start_address <= end_address。RAMの場合は範囲とサイズが一致すること。
    # @intent:rationale 範囲の重複は検査しない。先に登録されたデバイスが優先される。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        if not 0 <= start_address <= end_address:
            raise ValueError(f"Invalid address range {start_address:#x}-{end_address:#x}")
        if not isinstance(device, Device):
            raise TypeError(f"{type(device).__name__} is not a Device")
        span = end_address - start_address + 1
        if isinstance(device, RAM) and device.get_size() != span:
            raise ValueError(f"RAM of {device.get_size()} bytes cannot back a {span}-byte range")
        self._mappings.append(_Mapping(start_address, end_address, device))

    # @intent:responsibility start-endの全アドレスがいずれかのデバイスに割り当てられているかを返します。
    def is_mapped(self, start_address: int, end_address: int) -> bool:
        address = start_address
        while address <= end_address:
            mapping = self._lookup(address)
            if mapping is None:
                return False
            address = mapping.end + 1
        return True

    def _lookup(self, address: int) -> Optional[_Mapping]:
        for mapping in self._mappings:
            if mapping.start <= address <= mapping.end:
                return mapping
        return None

    def _resolve(self, address: int) -> Tuple[Device, int]:
        mapping = self._lookup(address)
        if mapping is None:
            raise OutOfBounds(f"Address {address:#06x} is not mapped")
        return mapping.device, address - mapping.start

    def get_and_clear_activity_log(self) -> List[BusAccess]:
        activity, self._activity = self._activity, []
        return activity

    def read(self, address: int) -> int:
        device, offset = self._resolve(address)
        data = device.read(offset)
        self._activity.append(BusAccess(address, data, BusAccessType.READ))
        return data

    def write(self, address: int, data: int) -> None:
        device, offset = self._resolve(address)
        previous = device.read(offset)
        device.write(offset, data)
        self._activity.append(BusAccess(address, data, BusAccessType.WRITE, previous_data=previous))

    # @intent:responsibility ログに残さない読み出し。逆アセンブラやUIの表示に使う。
    def peek(self, address: int) -> int:
        device, offset = self._resolve(address)
        return device.read(offset)

    # @intent:responsibility ログに残さない書き込み。フォント/プログラムの配置とステップバックに使う。
    def load(self, address: int, data: int) -> None:
        device, offset = self._resolve(address)
        device.write(offset, data)

    def load_block(self, address: int, data: bytes) -> None:
        for offset, value in enumerate(data):
            self.load(address + offset, value)
