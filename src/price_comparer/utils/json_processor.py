"""JSON import/export of price entries."""

import json
import os
from typing import Any, Dict, List

import aiofiles
from pydantic import ValidationError

from ..models.price import PriceEntry


class JSONProcessor:
    """JSON processor for price entry data."""
    
    async def save_entries_json(self, entries: List[PriceEntry], output_path: str) -> str:
        """Save price entries to a JSON file.
        
        Args:
            entries: PriceEntry objects to save
            output_path: Destination file; parent directories are created
        
        Returns:
            Path to the saved JSON file
        """
        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        
        data = [entry.model_dump(mode='json', exclude_none=True) for entry in entries]
        
        async with aiofiles.open(output_path, 'w', encoding='utf-8') as file:
            await file.write(json.dumps(data, indent=2, ensure_ascii=False))
        
        return output_path
    
    async def load_entries_json(self, json_file_path: str) -> List[Dict[str, Any]]:
        """Load raw price entry dicts from a JSON file.
        
        The file holds either a list of entries or a single entry object.
        """
        if not os.path.exists(json_file_path):
            raise FileNotFoundError(f"JSON file not found: {json_file_path}")
        
        async with aiofiles.open(json_file_path, 'r', encoding='utf-8') as file:
            content = await file.read()
        
        data = json.loads(content)
        if isinstance(data, dict):
            return [data]
        return data
    
    async def load_entries(self, json_file_path: str) -> List[PriceEntry]:
        """Load and validate price entries; ids and timestamps are dropped."""
        raw_entries = await self.load_entries_json(json_file_path)
        entries = []
        for raw in raw_entries:
            raw = {k: v for k, v in raw.items() if k not in ('id', 'created_at')}
            entries.append(PriceEntry.model_validate(raw))
        return entries
    
    async def validate_entries_json(self, json_file_path: str) -> bool:
        """Validate that a JSON file contains valid price entry data."""
        try:
            await self.load_entries(json_file_path)
            return True
        except (OSError, ValueError, ValidationError):
            return False
