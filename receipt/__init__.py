"""Pure receipt parsing: block decoding, extraction, reconciliation and scoring."""
