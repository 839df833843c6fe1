"""
Schema descriptions returned by describe_table().

The same shapes are produced by every backend; data_type keeps the
backend-native spelling (character varying, int(11), INTEGER...).
"""
from typing import List, Optional
from dataclasses import dataclass, field


@dataclass
class ColumnSchema:
    """Information about a table column."""
    name: str
    data_type: str
    is_nullable: bool
    default: Optional[str] = None


@dataclass
class TableSchema:
    """Information about a table. indexes is reserved and always empty."""
    table_name: str
    columns: List[ColumnSchema] = field(default_factory=list)
    indexes: List[str] = field(default_factory=list)

    def get_column_names(self) -> List[str]:
        """Get list of column names."""
        return [col.name for col in self.columns]

    @classmethod
    def from_column_names(cls, table_name: str, names: List[str]) -> "TableSchema":
        """
        Build a schema knowing only the column names.

        Used by the table browser, which shows names only; types are left
        empty and every column is treated as nullable.
        """
        return cls(
            table_name=table_name,
            columns=[ColumnSchema(name=name, data_type="", is_nullable=True) for name in names],
        )
