import numpy as np
from nrrdmeta import Center, Kind, Nrrd, domain_axes_get


if __name__ == '__main__':
    print("Wrapping RGB image...")
    image = Nrrd.wrap(np.zeros((48, 64, 3), dtype=np.uint8))
    image.axis[0].kind = Kind.RGB_COLOR
    for ai, (lo, hi) in zip((1, 2), ((0.0, 64.0), (-24.0, 24.0))):
        image.axis[ai].kind = Kind.SPACE
        image.axis[ai].min = lo
        image.axis[ai].max = hi
    image.axis[2].center = Center.NODE
    image.check()

    axes = domain_axes_get(image)
    print("Domain axes: ", axes)
    status, origin = image.origin_calculate(axes)
    print("Status: ", status.label)
    print("Origin: ", origin)
    status, origin = image.origin_calculate(axes, Center.NODE)
    print("Origin with node default: ", origin)
