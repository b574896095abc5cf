"""Binary format decoders and the extraction pipeline."""
