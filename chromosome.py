import numpy as np

'''
A chromosome is a big-endian bit vector (uint8 array of 0/1 values) encoding one color channel.
Operators never modify their inputs, they always hand back fresh arrays.
'''

def bit_weights(gene_length : int) -> np.ndarray:
    return 1 << np.arange(gene_length - 1, -1, -1, dtype = np.int64)

def encode(value : int, gene_length : int = 8) -> np.ndarray:
    if value < 0 or value >= 2 ** gene_length:
        raise ValueError("Value {} cannot be encoded with {:d} bits.".format(value, gene_length))
    return ((int(value) & bit_weights(gene_length)) > 0).astype(np.uint8)

def decode(genes : np.ndarray):
    '''
    Inverse of encode. The last axis holds the bits, any leading axes are preserved,
    so a whole population of shape (N, 3, L) decodes to (N, 3) channel values.
    '''
    genes = np.asarray(genes)
    return (genes.astype(np.int64) * bit_weights(genes.shape[-1])).sum(axis = -1)

def random_genes(rand : np.random.Generator, shape) -> np.ndarray:
    return rand.integers(0, 2, size = shape, dtype = np.uint8)

def mutate(genes : np.ndarray, rate : float, rand : np.random.Generator) -> np.ndarray:
    # Every bit flips independently with the given probability
    flips = rand.uniform(size = genes.shape) < rate
    return np.where(flips, 1 - genes, genes).astype(np.uint8)

def crossover(x : np.ndarray, y : np.ndarray, rate : float, rand : np.random.Generator):
    '''
    Single point crossover, the tails starting at the cut point are swapped.
    '''
    if rand.uniform() >= rate:
        return x.copy(), y.copy()

    l = x.shape[-1]
    # Evade the edge case of entirely copying parrents, cut is drawn from [1, l - 1]
    cut = int(rand.integers(1, l))
    c1 = x.copy()
    c2 = y.copy()
    c1[cut:] = y[cut:]
    c2[cut:] = x[cut:]
    return c1, c2

def crossover_uniform(x : np.ndarray, y : np.ndarray, rate : float, rand : np.random.Generator):
    if rand.uniform() >= rate:
        return x.copy(), y.copy()

    swap = rand.uniform(size = x.shape) < 0.5
    return np.where(swap, y, x), np.where(swap, x, y)

# Identity crossover
def crossover_id(x : np.ndarray, y : np.ndarray, rate : float = 0.0, rand : np.random.Generator = None):
    return x.copy(), y.copy()

CROSSOVERS = {
    "single_point": crossover,
    "uniform": crossover_uniform,
    "id": crossover_id
}
