import numpy as np
from nrrdmeta import Nrrd, Space, biff, nrrd_check, require_sanity


if __name__ == '__main__':
    require_sanity()

    print("Wrapping array...")
    array = np.random.random((32, 64, 64)).astype(np.float32)
    image = Nrrd.wrap(array)
    image.content = "random"

    print("Setting orientation...")
    image.space_set(Space.LEFT_POSTERIOR_SUPERIOR)
    spacing = (2.0, 2.5, 4.0)
    for ai in range(image.dim):
        image.axis[ai].space_direction[:3] = np.eye(3)[ai] * spacing[ai]
    image.space_origin_set([1.0, 1.0, 1.0])
    image.describe()
    print("Valid: ", nrrd_check(image))

    print("Adding a per-axis spacing on top of the direction...")
    image.axis[0].spacing = 2.0
    print("Valid: ", nrrd_check(image))
    print(biff.get_done("nrrd"))
