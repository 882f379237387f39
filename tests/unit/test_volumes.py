"""
Tests for diskcensus.platform.windows.volumes module.
"""

from diskcensus.core.models import NO_DATA_INFO, RAW_FILESYSTEM, UNFORMATTED_INFO
from diskcensus.platform.windows.volumes import (
    classify_columns,
    parse_partition_rows,
    parse_span_rows,
    parse_token_rows,
    parse_volume_rows,
)


class TestSpanRows:
    """Tests for the divider-based volume table parser."""

    def test_system_disk_volumes(self, system_disk_block: list[str]) -> None:
        volumes = parse_volume_rows(system_disk_block, 0)

        assert [v.volume for v in volumes] == ["Volume 1", "Volume 2", "Volume 3"]
        boot = volumes[0]
        assert boot.letter == "C"
        assert boot.label == "Windows"
        assert boot.filesystem == "NTFS"
        assert boot.type == "Partition"
        assert boot.size == "930 GB"
        assert boot.status == "Healthy"
        assert boot.info == "Boot"

    def test_empty_cells_stay_empty(self, system_disk_block: list[str]) -> None:
        efi = parse_span_rows(system_disk_block)[1]
        assert efi.letter == ""
        assert efi.label == ""
        assert efi.filesystem == "FAT32"
        assert efi.info == "System"

    def test_partition_table_is_not_read_as_volumes(self, system_disk_block: list[str]) -> None:
        volumes = parse_span_rows(system_disk_block)
        assert not any(v.volume.startswith("Partition") for v in volumes)

    def test_label_with_spaces(self, table_renderer, volume_columns) -> None:
        block = table_renderer(
            volume_columns,
            [["Volume 5", "E", "My Backups", "exFAT", "Removable", "58 GB", "Healthy", ""]],
        )
        (volume,) = parse_span_rows(block)
        assert volume.label == "My Backups"
        assert volume.filesystem == "exFAT"
        assert volume.type == "Removable"

    def test_multiple_volume_tables_are_concatenated(self, table_renderer, volume_columns) -> None:
        block = (
            table_renderer(volume_columns, [["Volume 1", "C", "", "NTFS", "Partition", "10 GB", "Healthy", ""]])
            + ["", "Some interleaved text", ""]
            + table_renderer(volume_columns, [["Volume 2", "D", "", "NTFS", "Partition", "20 GB", "Healthy", ""]])
        )
        volumes = parse_span_rows(block)
        assert [v.letter for v in volumes] == ["C", "D"]


class TestTokenRows:
    """Tests for the vocabulary-based fallback parser."""

    def test_classify_columns(self) -> None:
        values = classify_columns(["C", "Windows", "NTFS", "Partition", "930 GB", "Healthy", "Boot"])
        assert values == {
            "letter": "C",
            "label": "Windows",
            "filesystem": "NTFS",
            "type": "Partition",
            "size": "930 GB",
            "status": "Healthy",
            "info": "Boot",
        }

    def test_rows_without_header(self) -> None:
        block = [
            "Disk ID: {6E1B3C4A}",
            "  Volume 1     C   Windows      NTFS   Partition    930 GB  Healthy    Boot",
            "  Volume 2                      FAT32  Partition    100 MB  Healthy    System",
        ]
        volumes = parse_volume_rows(block)

        assert len(volumes) == 2
        assert volumes[0].letter == "C"
        assert volumes[0].label == "Windows"
        assert volumes[1].letter == ""
        assert volumes[1].filesystem == "FAT32"
        assert volumes[1].info == "System"

    def test_partition_lines_are_skipped(self) -> None:
        block = ["  Partition 1    Primary           1863 GB  1024 KB"]
        assert parse_token_rows(block) == []


class TestPartitionRows:
    """Tests for RAW volumes synthesized from partitions."""

    def test_unformatted_disk(self, unformatted_disk_block: list[str]) -> None:
        volumes = parse_volume_rows(unformatted_disk_block, 1)

        assert len(volumes) == 1
        raw = volumes[0]
        assert raw.volume == "Partition 1"
        assert raw.filesystem == RAW_FILESYSTEM
        assert raw.type == "Partition"
        assert raw.info == UNFORMATTED_INFO
        assert raw.size == "1863 GB"
        assert raw.is_raw

    def test_partition_lines_without_header(self) -> None:
        block = [
            "  Partition 1    Primary            465 GB  1024 KB",
            "  Partition 2    Recovery           529 MB   465 GB",
        ]
        volumes = parse_partition_rows(block)
        assert [(v.volume, v.size) for v in volumes] == [("Partition 1", "465 GB"), ("Partition 2", "529 MB")]


class TestSentinel:
    def test_unparseable_block(self) -> None:
        volumes = parse_volume_rows(["DiskPart has encountered an error.", "", "The device is not ready."])
        assert len(volumes) == 1
        assert volumes[0].is_sentinel
        assert volumes[0].info == NO_DATA_INFO

    def test_empty_block(self) -> None:
        volumes = parse_volume_rows([])
        assert len(volumes) == 1
        assert volumes[0].is_sentinel
