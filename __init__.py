"""Receipt OCR parsing: document-analysis blocks in, structured line items out."""
