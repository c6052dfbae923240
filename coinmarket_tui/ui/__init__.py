"""Terminal-facing components: key decoding, input routing, rendering."""
