"""Sub-package set aside for the network configuration language; it holds no modules yet."""