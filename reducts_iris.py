# script discretizing the iris dataset, computing its rough set reducts and
# printing them together with the local reducts of a few samples

import logging

from sklearn.datasets import load_iris
from sklearn.preprocessing import KBinsDiscretizer
from sklearn.utils import Bunch

from sklearn_reducts import RoughSetReducts

logging.basicConfig(level=logging.INFO)

iris = load_iris()  # type: Bunch
discretizer = KBinsDiscretizer(n_bins=4, encode='ordinal', strategy='uniform')
X = discretizer.fit_transform(iris.data)

print("feature names: " + ', '.join(iris.feature_names))
for method in ('AllGlobal', 'OneJohnson', 'AllJohnson', 'PartialGlobal'):
    est = RoughSetReducts(reducts_method=method, alpha=0.1)
    est.fit(X, iris.target)
    print("# %s reducts #" % method)
    print(est.export_text(iris.feature_names))

est = RoughSetReducts(reducts_method='AllLocal')
est.fit(X, iris.target)
print("# AllLocal reducts of samples 0, 50, 100 #")
for sample in (0, 50, 100):
    print("## sample %d: %s ##" % (sample, iris.target_names[iris.target[sample]]))
    for reduct in est.local_reducts_[sample]:
        print('{' + ', '.join(iris.feature_names[i] for i in reduct) + '}')
print("core: " + ', '.join(iris.feature_names[i] for i in est.core_))
