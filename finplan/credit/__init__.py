"""Credit pipeline: score model → scenario simulator → advisor."""
