ERRORS = {
  "E_FORMAT": "Not an icns container (bad magic signature)",
  "E_TRUNCATED": "Container or chunk header truncated or declares an invalid length",
  "E_NO_RENDERABLE": "Container holds no PNG/JPEG image (only legacy RLE, raw or JPEG 2000 data)",
  "E_DECODE": "Embedded image data could not be decoded",
}
