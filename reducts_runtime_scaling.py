# script comparing the runtime of both prime implicant algorithms on the
# discernibility matrices of random tables with a growing number of features.
# usage: reducts_runtime_scaling.py [n_samples]

import logging
import sys
import timeit

import matplotlib.pyplot as plt

from sklearn_reducts.discernibility import DiscernibilityMatrixProvider
from sklearn_reducts.logic import PrimeImplicantsAlgorithm, \
    make_prime_implicants_provider
from sklearn_reducts.tests.datasets import random_categorical

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger('reducts_runtime_scaling')

n_samples = int(sys.argv[1]) if len(sys.argv) > 1 else 50
feature_counts = range(2, 17, 2)

axes = plt.figure().add_subplot(xlabel='n_features', ylabel='time[s]')
for algorithm in PrimeImplicantsAlgorithm:
    provider = make_prime_implicants_provider(algorithm)
    timings = []
    for n_features in feature_counts:
        table = random_categorical(n_samples, n_features).table()
        cnf = DiscernibilityMatrixProvider(table).get_discernibility_matrix()
        timing = min(timeit.repeat(
            lambda: provider.generate_prime_implicants(cnf, table.width),
            number=1, repeat=3))
        logger.info("%s, %d features: %d clauses in %.4fs",
                    algorithm.value, n_features, len(cnf), timing)
        timings.append(timing)
    axes.semilogy(feature_counts, timings, '.-', label=algorithm.value)
axes.set_title('prime implicants of %d samples' % n_samples)
axes.legend(title='algorithm')
axes.grid(True)
plt.show()
