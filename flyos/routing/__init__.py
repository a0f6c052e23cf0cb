"""Route types, their registry and the command-line route manager."""